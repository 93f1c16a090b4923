class SupabaseError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class FetchError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class FetchExhaustedError(Exception):
    def __init__(self, url: str, last_error: Exception | None = None):
        self.url = url
        self.last_error = last_error
        if last_error is not None:
            self.message = str(last_error)
        else:
            self.message = f"Failed to fetch HTML from {url} using all available methods"
        super().__init__(self.message)


class PageParseError(Exception):
    def __init__(self, message: str, url: str | None = None):
        self.message = message
        self.url = url
        super().__init__(message)


class InvalidPageStructureError(PageParseError):
    pass


class MissingRequiredFieldError(PageParseError):
    def __init__(self, field: str, url: str | None = None):
        self.field = field
        super().__init__(f"Failed to extract casino {field}", url=url)
