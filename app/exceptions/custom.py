class CompletionServiceError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class UpstreamTimeoutError(Exception):
    def __init__(self, service: str, timeout: float):
        self.service = service
        self.timeout = timeout
        super().__init__(f"{service} did not answer within {timeout}s")


class RateLimitError(Exception):
    def __init__(self, service: str, retry_after_ms: int = 2000):
        self.service = service
        self.retry_after_ms = retry_after_ms
        super().__init__(f"Rate limit exceeded for {service}")


class ExtractionError(Exception):
    """Model output could not be turned into a valid record.

    ``raw_output`` is kept for logging only and must never reach a user.
    """

    def __init__(self, message: str, phase: str, raw_output: str = ""):
        self.message = message
        self.phase = phase
        self.raw_output = raw_output
        super().__init__(message)


class TemplateMismatchError(Exception):
    def __init__(self, selector: str, template_id: str = "landwind-v1"):
        self.selector = selector
        self.template_id = template_id
        super().__init__(
            f'Required template selector "{selector}" not found in template "{template_id}"'
        )


class TemplateLoadError(Exception):
    def __init__(self, template_path: str, reason: str | None = None):
        self.template_path = template_path
        self.reason = reason
        super().__init__(f'Failed to load template from "{template_path}"')
