class ServiceError(Exception):
    pass


class ConversionError(ServiceError):
    pass


class AIResponseFormatError(ConversionError):
    def __init__(self, reason: str, raw_text: str = ""):
        super().__init__(f"AI response is not a recipe JSON object: {reason}")
        self.reason = reason
        self.raw_text = raw_text
