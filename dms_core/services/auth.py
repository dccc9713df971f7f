"""
Authentication service.

OTP login on top of the backend switcher. The resulting token is kept in an
AuthStore; the real backend reads it back through its token provider on
every request.
"""
from typing import Optional

from ..api.dto import OTPGenerateRequest, OTPGenerateResponse, OTPValidateRequest
from ..api.exceptions import ApiResponseError, ValidationError
from ..domain.entities import UserData
from ..utils.validators import format_mobile_number, validate_mobile_number, validate_otp_format
from .api_switcher import BackendSwitcher
from ..core.logging_config import get_logger

logger = get_logger(__name__)


class AuthStore:
    """Session state: the bearer token and the signed-in user."""

    def __init__(self):
        self.token: Optional[str] = None
        self.user_data: Optional[UserData] = None
        self.is_authenticated = False

    def login_success(self, token: str, user_data: UserData):
        self.token = token
        self.user_data = user_data
        self.is_authenticated = True

    def logout(self):
        self.token = None
        self.user_data = None
        self.is_authenticated = False

    def get_current_token(self) -> Optional[str]:
        return self.token

    def is_user_authenticated(self) -> bool:
        return self.is_authenticated


class AuthService:
    def __init__(self, switcher: BackendSwitcher, store: AuthStore):
        self.switcher = switcher
        self.store = store

    async def generate_otp(self, mobile_number: str) -> OTPGenerateResponse:
        """
        Request an OTP for a mobile number.

        Args:
            mobile_number: Any formatting; reduced to its last 10 digits

        Raises:
            ValidationError: the number does not have 10 digits
        """
        mobile = format_mobile_number(mobile_number)
        if not validate_mobile_number(mobile):
            raise ValidationError("Please enter a valid 10-digit mobile number")

        try:
            response = await self.switcher.generate_otp(OTPGenerateRequest(mobile_number=mobile))
        except Exception as e:
            logger.error(f"Error generating OTP: {e}")
            raise

        if not response.success:
            raise ApiResponseError(response.message or "OTP generation failed")
        return response

    async def validate_otp_and_login(self, mobile_number: str, otp: str) -> UserData:
        """
        Validate the OTP and record the session in the store.

        Returns:
            UserData for the signed-in user

        Raises:
            ValidationError: malformed number or OTP (checked locally first)
            ApiResponseError: the backend accepted the call but returned no token
        """
        mobile = format_mobile_number(mobile_number)
        if not validate_mobile_number(mobile):
            raise ValidationError("Please enter a valid 10-digit mobile number")
        if not validate_otp_format(otp):
            raise ValidationError("Please enter a valid 6-digit OTP")

        try:
            response = await self.switcher.validate_otp(OTPValidateRequest(mobile_number=mobile, otp=otp))
        except Exception as e:
            logger.error(f"Error validating OTP: {e}")
            raise

        if not response.success or not response.token:
            raise ApiResponseError(response.message or "OTP validation failed")

        user_data = UserData(mobile_number=mobile, token=response.token)
        self.store.login_success(response.token, user_data)
        logger.info(f"User logged in: {mobile}")
        return user_data

    async def logout(self):
        self.store.logout()
        logger.info("User logged out")
