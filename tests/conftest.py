import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.database import Base, get_db
from app.core.security import create_access_token, get_password_hash
from app.models.admin import Admin
from app.models.user import User
from app.services.approval_service import ApprovalService
from app.services.project_service import ProjectService

# Sử dụng SQLite in-memory database cho testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Tạo database session mới cho mỗi test"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Tạo test client với database session override"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    # Mock email sending functions để tránh lỗi khi test
    with patch('app.api.v1.auth.send_verify_email_otp') as mock_send_verify:
        with patch('app.api.v1.auth.send_reset_email') as mock_send_reset:
            mock_send_verify.return_value = True
            mock_send_reset.return_value = True

            with TestClient(app) as test_client:
                yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def test_user_data():
    """Dữ liệu user mẫu để testing"""
    return {
        "name": "Test User",
        "email": "testuser@example.com",
        "password": "TestPassword123!"
    }


@pytest.fixture
def create_test_user(db_session):
    """Factory fixture để tạo test user"""

    def _create_user(email="testuser@example.com", name="Test User",
                     password="TestPassword123!", state="verified"):
        user = User(
            name=name,
            email=email,
            password_hash=get_password_hash(password),
            state=state,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create_user


@pytest.fixture
def create_test_admin(db_session):
    """Factory fixture để tạo admin"""

    def _create_admin(email="admin@example.com", name="Admin", password="AdminPassword123!"):
        admin = Admin(name=name, email=email, password_hash=get_password_hash(password))
        db_session.add(admin)
        db_session.commit()
        db_session.refresh(admin)
        return admin

    return _create_admin


@pytest.fixture
def auth_header():
    """Tạo Authorization header cho user hoặc admin"""

    def _header(account, role="user"):
        token = create_access_token(data={"sub": account.email, "role": role})
        return {"Authorization": f"Bearer {token}"}

    return _header


@pytest.fixture
def authenticated_client(client, create_test_user, auth_header):
    """Tạo authenticated client với access token"""
    user = create_test_user()
    client.headers = {**client.headers, **auth_header(user)}
    return client, user


@pytest.fixture
def create_project(db_session, create_test_admin):
    """Factory fixture để tạo project (mặc định đã được approve)"""
    state = {}

    def _create_project(creator, name="Website Redesign", approved=True, **kwargs):
        project = ProjectService(db_session).create(
            creator_id=creator.id,
            name=name,
            description=kwargs.pop("description", "Redesign the company website"),
            **kwargs,
        )
        if approved:
            if "admin" not in state:
                state["admin"] = create_test_admin(email="approver@example.com", name="Approver")
            ApprovalService(db_session).approve(project.id, state["admin"].id, "approved")
            db_session.refresh(project)
        return project

    return _create_project
