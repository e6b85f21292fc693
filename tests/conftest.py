import io
import os

# Settings are read once, so the environment has to be in place before any api import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_JWT_SECRET"] = "test-secret"
os.environ["AWS_S3_PUBLIC_BASE_URL"] = "https://blobs.test"
os.environ["OPENAI_API_KEY"] = ""
os.environ["ANTHROPIC_API_KEY"] = ""

import jwt
import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import api.models  # noqa: F401
from api.core import database
from api.core.database import Base
from api.main import app
from api.models.course import Course
from api.models.user import ClassLevel, User, UserRole
from api.services import s3_service

TEST_SECRET = "test-secret"


class FakeS3Client:
    """Just enough of the boto3 S3 client for the blob store."""

    def __init__(self):
        self.objects = {}
        self.fail_uploads = False
        self.fail_deletes = False

    @staticmethod
    def _error(code, operation):
        return ClientError({"Error": {"Code": code, "Message": code}}, operation)

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None):
        if self.fail_uploads:
            raise self._error("InternalError", "PutObject")
        self.objects[key] = fileobj.read()

    def head_object(self, Bucket, Key):
        if self.fail_deletes:
            raise self._error("AccessDenied", "HeadObject")
        if Key not in self.objects:
            raise self._error("404", "HeadObject")
        return {"ContentLength": len(self.objects[Key]), "ContentType": "application/pdf"}

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)
        return {}

    def get_object(self, Bucket, Key):
        if Key not in self.objects:
            raise self._error("NoSuchKey", "GetObject")
        return {"Body": io.BytesIO(self.objects[Key])}


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_s3(monkeypatch):
    client = FakeS3Client()
    monkeypatch.setattr(s3_service, "_s3_service", s3_service.S3Service(s3_client=client))
    return client


@pytest.fixture
def client(session_factory, fake_s3):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[database.get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_token(subject, secret=TEST_SECRET, **claims):
    return jwt.encode({"sub": subject, **claims}, secret, algorithm="HS256")


@pytest.fixture
def auth_header():
    def build(subject):
        return {"Authorization": f"Bearer {make_token(subject)}"}
    return build


@pytest.fixture
def make_user(db):
    def build(role=UserRole.student, subject=None, full_name=None, class_level=ClassLevel.ND1, email=None):
        count = db.query(User).count() + 1
        user = User(
            auth_subject=subject or f"{role.value}-{count}",
            role=role,
            full_name=full_name or f"{role.value.title()} {count}",
            email=email or f"{role.value}{count}@school.edu",
            matriculation_number=f"MAT/{count:04d}" if role == UserRole.student else None,
            class_level=class_level if role == UserRole.student else None,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return build


@pytest.fixture
def make_course(db):
    def build(lecturer, title="Data Structures", required_class=ClassLevel.ND1):
        course = Course(
            title=title,
            lecturer_id=lecturer.id,
            lecturer_name=lecturer.full_name,
            required_class=required_class,
        )
        db.add(course)
        db.commit()
        db.refresh(course)
        return course
    return build
