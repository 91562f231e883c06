from .otp_code import OtpCode
from .profile import Profile
from .housing_application import HousingApplication

__all__ = ['OtpCode', 'Profile', 'HousingApplication']
