from enum import Enum


class OTPPurpose(str, Enum):
    signup = "signup"
    login = "login"
