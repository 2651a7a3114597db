class ServiceError(Exception):
    pass


class FetchError(ServiceError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NetworkTimeoutError(FetchError):
    def __init__(self, url: str, timeout_seconds: float):
        super().__init__(f"Network timeout after {timeout_seconds}s: {url}")
        self.url = url
        self.timeout_seconds = timeout_seconds


class ExtractionError(ServiceError):
    pass


class NoContentError(ExtractionError):
    pass


class NoRecipeFoundError(ExtractionError):
    pass


class ModelConfigurationError(ServiceError):
    pass


class ModelError(ServiceError):
    def __init__(self, message: str, last_error: BaseException | None = None):
        super().__init__(message)
        self.last_error = last_error


class SchemaError(ServiceError):
    pass


class RecipeNotFoundError(ServiceError):
    def __init__(self, recipe_id: str):
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id
