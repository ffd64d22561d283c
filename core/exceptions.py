# A base class for all custom service-related exceptions.
# Every error carries an HTTP status and a localized message that is safe
# to show to the user; `message` is for the server log only.
class ServiceError(Exception):
    """Base class for service-related errors."""
    status_code = 500
    default_kind = None
    public_message = "حدث خطأ غير متوقع أثناء المعالجة"

    def __init__(self, message="", kind=None, public_message=None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message
        self.kind = kind or self.default_kind
        if public_message:
            self.public_message = public_message

    def __str__(self):
        if self.kind:
            return f"[{self.kind}] {self.message}"
        return self.message


class ValidationError(ServiceError):
    """Missing or malformed request input."""
    status_code = 400
    public_message = "البيانات المرسلة غير صالحة"

    def __init__(self, message="", kind=None, public_message=None):
        # validation messages are written for the user already
        super().__init__(message, kind, public_message or message or None)


class AuthError(ServiceError):
    """Missing, invalid or expired bearer credential."""
    status_code = 401
    public_message = "غير مصرح لك، يرجى تسجيل الدخول"


class OwnershipError(ServiceError):
    """The acting user does not own the referenced record."""
    status_code = 403
    public_message = "ليس لديك إذن للوصول إلى هذا المورد"


class NotFoundError(ServiceError):
    status_code = 404
    public_message = "العنصر المطلوب غير موجود"


class ExtractionError(ServiceError):
    """Raised when a document cannot be fetched, decoded or read."""
    UNSUPPORTED_TYPE = "UnsupportedType"
    FETCH_FAILED = "FetchFailed"
    NO_TEXT_FOUND = "NoTextFound"
    FILE_TOO_LARGE = "FileTooLarge"
    OCR_TIMEOUT = "OCRTimeout"
    NOT_ARABIC_CONTENT = "NotArabicContent"

    default_kind = NO_TEXT_FOUND
    public_message = "فشل في استخراج محتوى الملف"


# Failures of the language-model API. The kind says which failure it was;
# only RateLimited is ever retried.
class UpstreamError(ServiceError):
    """Raised when the language-model API call fails."""
    AUTH_FAILED = "AuthFailed"
    RATE_LIMITED = "RateLimited"
    UPSTREAM_ERROR = "UpstreamError"
    TIMEOUT = "Timeout"

    default_kind = UPSTREAM_ERROR
    public_message = "تعذر الاتصال بخدمة الذكاء الاصطناعي، حاول مرة أخرى"

    def __init__(self, message="", kind=None, status=None, body=None):
        super().__init__(message, kind)
        self.status = status
        self.body = body


class ParseError(ServiceError):
    """The model output did not match the expected structure."""
    INVALID_FORMAT = "InvalidFormat"

    default_kind = INVALID_FORMAT
    public_message = "فشل في تحليل المحتوى المولد"

    def __init__(self, message="", position=None):
        super().__init__(message, self.INVALID_FORMAT)
        # 1-based index of the offending item, when there is one
        self.position = position


class PersistenceError(ServiceError):
    """A database write failed."""
    public_message = "فشل في حفظ البيانات، حاول مرة أخرى"
