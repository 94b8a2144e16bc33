import pytest
from datetime import timedelta
from fastapi import status
from app.core.security import get_otp_hash
from app.models.user import User
from app.utils.timeutils import utcnow


class TestRegisterEndpoint:
    """Test cases cho POST /api/v1/auth/register endpoint"""

    def test_register_success(self, client, test_user_data, db_session):
        """Test đăng ký user thành công"""
        response = client.post("/api/v1/auth/register", json=test_user_data)

        assert response.status_code == status.HTTP_200_OK

        data = response.json()
        assert data["message"] == "Register successfully, please check your mail to verify email"
        user_data = data["user"]
        assert user_data["email"] == test_user_data["email"]
        assert user_data["name"] == test_user_data["name"]
        assert user_data["state"] == "pending"
        assert "id" in user_data

        # User mới ở trạng thái pending, OTP đã được hash
        db_user = db_session.query(User).filter(User.email == test_user_data["email"]).first()
        assert db_user is not None
        assert db_user.state == "pending"
        assert db_user.registration_otp is not None
        assert db_user.password_hash != test_user_data["password"]

    def test_register_sends_otp(self, client, test_user_data):
        """Test OTP được gửi tới email đăng ký"""
        from app.api.v1 import auth

        client.post("/api/v1/auth/register", json=test_user_data)

        auth.send_verify_email_otp.assert_called_once()
        to_email, otp = auth.send_verify_email_otp.call_args[0]
        assert to_email == test_user_data["email"]
        assert len(otp) == 6 and otp.isdigit()

    def test_register_duplicate_email(self, client, test_user_data, create_test_user):
        """Test đăng ký với email đã tồn tại"""
        create_test_user(email=test_user_data["email"])

        response = client.post("/api/v1/auth/register", json=test_user_data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Email already registered"

    def test_register_invalid_email_format(self, client, test_user_data):
        """Test đăng ký với email format không hợp lệ"""
        invalid_data = test_user_data.copy()
        invalid_data["email"] = "invalid-email-format"

        response = client.post("/api/v1/auth/register", json=invalid_data)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_register_missing_required_fields(self, client):
        """Test đăng ký thiếu required fields"""
        response = client.post(
            "/api/v1/auth/register",
            json={"name": "Test User", "password": "TestPassword123!"},
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestVerifyEmailEndpoint:
    """Test cases cho POST /api/v1/auth/verify-email"""

    def _pending_user(self, create_test_user, db_session, code="123456", expired=False):
        user = create_test_user(state="pending")
        user.registration_otp = get_otp_hash(code)
        user.registration_otp_expiration = utcnow() + timedelta(minutes=-5 if expired else 30)
        db_session.commit()
        return user

    def test_verify_success(self, client, create_test_user, db_session):
        """Test xác thực OTP thành công, user chuyển sang verified"""
        user = self._pending_user(create_test_user, db_session)

        response = client.post(
            f"/api/v1/auth/verify-email?email={user.email}", json={"code": "123456"}
        )

        assert response.status_code == status.HTTP_200_OK
        db_session.refresh(user)
        assert user.state == "verified"
        assert user.registration_otp is None

    def test_verify_wrong_code(self, client, create_test_user, db_session):
        """Test OTP sai"""
        user = self._pending_user(create_test_user, db_session)

        response = client.post(
            f"/api/v1/auth/verify-email?email={user.email}", json={"code": "000000"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Invalid OTP"

    def test_verify_expired_code(self, client, create_test_user, db_session):
        """Test OTP đã hết hạn"""
        user = self._pending_user(create_test_user, db_session, expired=True)

        response = client.post(
            f"/api/v1/auth/verify-email?email={user.email}", json={"code": "123456"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Invalid or expired OTP"


class TestLoginEndpoint:
    """Test cases for POST /api/v1/auth/login endpoint"""

    def test_login_success(self, client, create_test_user, db_session):
        """Test successful login with valid email and password"""
        user = create_test_user()

        response = client.post(
            "/api/v1/auth/login",
            data={"email": user.email, "password": "TestPassword123!"},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"
        db_session.refresh(user)
        assert user.last_login is not None

    def test_login_invalid_password(self, client, create_test_user):
        """Test login with incorrect password"""
        user = create_test_user()

        response = client.post(
            "/api/v1/auth/login",
            data={"email": user.email, "password": "wrongpassword"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Incorrect email or password"

    @pytest.mark.parametrize("state,detail", [
        ("pending", "Email not verified"),
        ("blocked", "User is blocked"),
    ])
    def test_login_rejected_states(self, client, create_test_user, state, detail):
        """Test login với user pending hoặc blocked"""
        user = create_test_user(state=state)

        response = client.post(
            "/api/v1/auth/login",
            data={"email": user.email, "password": "TestPassword123!"},
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == detail


class TestPasswordResetEndpoints:
    """Test cases cho forgot-password và reset-password"""

    def test_forgot_password_sends_code(self, client, create_test_user, db_session):
        from app.api.v1 import auth

        user = create_test_user()

        response = client.post("/api/v1/auth/forgot-password", json={"email": user.email})

        assert response.status_code == status.HTTP_200_OK
        auth.send_reset_email.assert_called_once()
        db_session.refresh(user)
        assert user.reset_otp is not None

    def test_forgot_password_unknown_email(self, client):
        response = client.post(
            "/api/v1/auth/forgot-password", json={"email": "nobody@example.com"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_reset_password_flow(self, client, create_test_user):
        """Test đổi mật khẩu bằng mã reset rồi đăng nhập với mật khẩu mới"""
        from app.api.v1 import auth

        user = create_test_user()
        client.post("/api/v1/auth/forgot-password", json={"email": user.email})
        _, code = auth.send_reset_email.call_args[0]

        response = client.post(
            "/api/v1/auth/reset-password",
            json={"email": user.email, "code": code, "new_password": "NewPassword456!"},
        )
        assert response.status_code == status.HTTP_200_OK

        login = client.post(
            "/api/v1/auth/login",
            data={"email": user.email, "password": "NewPassword456!"},
        )
        assert login.status_code == status.HTTP_200_OK

    def test_reset_password_wrong_code(self, client, create_test_user):
        user = create_test_user()
        client.post("/api/v1/auth/forgot-password", json={"email": user.email})

        response = client.post(
            "/api/v1/auth/reset-password",
            json={"email": user.email, "code": "not-it", "new_password": "NewPassword456!"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
