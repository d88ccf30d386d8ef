"""HD Notes: passwordless email/OTP authentication and personal notes API."""
