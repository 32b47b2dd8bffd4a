from .cache_key import CacheKey
from .credentials import OtpCode, Password
from .email import Email
from .error import ErrorKind, TranslatedError
from .result import Err, Ok, Result
from .token_pair import TokenPair, parse_duration

__all__ = [
    "CacheKey",
    "Email",
    "Err",
    "ErrorKind",
    "Ok",
    "OtpCode",
    "Password",
    "Result",
    "TokenPair",
    "TranslatedError",
    "parse_duration",
]
