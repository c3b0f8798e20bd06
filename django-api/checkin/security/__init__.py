from checkin.security import cipher, credentials

__all__ = ["cipher", "credentials"]
