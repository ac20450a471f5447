from __future__ import annotations

import uuid

from tortoise import fields
from tortoise.models import Model


class User(Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    google_id = fields.CharField(max_length=255, unique=True)
    email = fields.CharField(max_length=255, null=True)
    name = fields.CharField(max_length=255, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "users"


class AudioRecording(Model):
    id = fields.IntField(pk=True)
    owner_id = fields.CharField(max_length=255, index=True)
    title = fields.CharField(max_length=512, null=True)
    transcription = fields.TextField()
    embedding = fields.TextField()
    object_key = fields.CharField(max_length=1024, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "audio"


class Note(Model):
    id = fields.IntField(pk=True)
    owner_id = fields.CharField(max_length=255, index=True)
    title = fields.CharField(max_length=512)
    category = fields.CharField(max_length=255)
    exam = fields.CharField(max_length=255)
    paper = fields.CharField(max_length=255)
    subject = fields.CharField(max_length=255)
    topics = fields.TextField()
    text = fields.TextField()
    vector = fields.TextField()
    object_key = fields.CharField(max_length=1024, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "notes"


class PastPaper(Model):
    id = fields.IntField(pk=True)
    owner_id = fields.CharField(max_length=255, index=True)
    title = fields.CharField(max_length=512, null=True)
    text = fields.TextField()
    vector = fields.TextField()
    object_key = fields.CharField(max_length=1024, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "previous_papers"


class Student(Model):
    id = fields.IntField(pk=True)
    owner_id = fields.CharField(max_length=255, index=True)
    name = fields.CharField(max_length=255)
    student_number = fields.CharField(max_length=64)
    email = fields.CharField(max_length=255)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "students"
