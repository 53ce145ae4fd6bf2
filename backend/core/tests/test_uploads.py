"""Integration tests — file uploads (/api/core/uploads/)."""

from __future__ import annotations

import shutil
import tempfile

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import UserRole

User = get_user_model()


class TestUploads(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(
            email="admin@example.com", password="pass1234", name="Admin Ada", role=UserRole.ADMIN,
        )
        cls.carla = User.objects.create_user(
            email="carla@example.com", password="pass1234", name="Client Carla",
        )

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)
        media = override_settings(MEDIA_ROOT=self.media_root)
        media.enable()
        self.addCleanup(media.disable)

        self.client = APIClient()
        self.client.force_authenticate(user=self.carla)
        self.url = reverse("core:uploads")

    def _upload(self, name, content=b"hello", content_type="text/plain", **extra):
        upload = SimpleUploadedFile(name, content, content_type=content_type)
        return self.client.post(self.url, {"file": upload, **extra}, format="multipart")

    def test_upload_complaint_attachment(self):
        resp = self._upload("error log.txt")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=f"Body: {resp.data}")
        self.assertEqual(resp.data["original_name"], "error log.txt")
        self.assertRegex(resp.data["filename"], r"^error_log_[0-9a-f]{32}\.txt$")
        self.assertTrue(resp.data["url"].startswith("/media/uploads/complaints/"))
        self.assertEqual(resp.data["size"], 5)
        self.assertEqual(resp.data["mime_type"], "text/plain")

    def test_disallowed_type(self):
        resp = self._upload("run.exe", content_type="application/x-msdownload")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["detail"], "File type application/x-msdownload is not allowed")

    def test_profile_upload_requires_image(self):
        resp = self._upload("cv.pdf", content_type="application/pdf", type="profile")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["detail"], "Only image files are allowed for profile pictures")

    @override_settings(UPLOAD_MAX_SIZE=1024 * 1024)
    def test_size_limit(self):
        resp = self._upload("big.txt", content=b"x" * (1024 * 1024 + 1))

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["detail"], "File size exceeds the 1MB limit")

    def test_missing_file(self):
        resp = self.client.post(self.url, {}, format="multipart")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_reports_per_file_errors(self):
        files = [
            SimpleUploadedFile("ok.txt", b"fine", content_type="text/plain"),
            SimpleUploadedFile("bad.exe", b"nope", content_type="application/x-msdownload"),
        ]
        resp = self.client.post(reverse("core:uploads-bulk"), {"files": files}, format="multipart")

        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=f"Body: {resp.data}")
        self.assertEqual([f["original_name"] for f in resp.data["files"]], ["ok.txt"])
        self.assertEqual(resp.data["errors"][0]["filename"], "bad.exe")

    def test_listing_is_admin_only(self):
        self._upload("a.txt")

        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        resp = self.client.get(self.url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data["files"]), 1)
        self.assertEqual(resp.data["files"][0]["directory"], "uploads/complaints")
