from django.contrib import admin

from .models import Comment, CommentReaction, Complaint, ComplaintHistory, NatureType


@admin.register(NatureType)
class NatureTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active", "created_by", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name",)


class ComplaintHistoryInline(admin.TabularInline):
    model = ComplaintHistory
    extra = 0
    readonly_fields = ("status", "assigned_from", "assigned_to", "notes", "changed_by", "timestamp")
    can_delete = False


@admin.register(Complaint)
class ComplaintAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "status", "department", "client", "current_assignee", "created_at")
    list_filter = ("status", "department", "nature_type")
    search_fields = ("title", "description")
    raw_id_fields = ("client", "current_assignee", "first_assignee")
    inlines = [ComplaintHistoryInline]


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ("id", "complaint", "author", "is_internal", "created_at")
    list_filter = ("is_internal",)
    raw_id_fields = ("complaint", "parent", "author")


admin.site.register(CommentReaction)
