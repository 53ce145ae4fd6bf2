"""Page/limit pagination for complaint listings."""

from rest_framework.pagination import PageNumberPagination

from core.constants import COMPLAINT_MAX_PAGE_SIZE, COMPLAINT_PAGE_SIZE


class ComplaintPagination(PageNumberPagination):
    page_size = COMPLAINT_PAGE_SIZE
    page_size_query_param = "limit"
    max_page_size = COMPLAINT_MAX_PAGE_SIZE
