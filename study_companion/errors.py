"""Typed failures surfaced by the study pack pipeline and its HTTP layer."""

API_KEY_HELP = 'Get a free API key at: https://makersuite.google.com/app/apikey'


class StudyPackError(Exception):
    status_code = 500
    default_message = 'An unexpected error occurred.'

    def __init__(self, message=None, *, help=None, retry_after=None):
        self.message = message or self.default_message
        self.help = help
        self.retry_after = retry_after
        super().__init__(self.message)

    def to_payload(self, request_id=''):
        payload = {'error': self.message}
        if self.help:
            payload['help'] = self.help
        if self.retry_after:
            payload['retryAfter'] = int(self.retry_after)
        if request_id:
            payload['requestId'] = request_id
        return payload


class InputError(StudyPackError):
    status_code = 400
    default_message = 'Invalid request.'


class ExtractionError(StudyPackError):
    status_code = 400
    default_message = 'Failed to process the uploaded file.'

    def __init__(self, category, message=None, **kwargs):
        self.category = category
        self.detail = message
        super().__init__(message, **kwargs)


class StorageUnavailableError(StudyPackError):
    status_code = 503
    default_message = 'File storage is not configured on this server. Please paste the text content directly.'


class ConfigurationError(StudyPackError):
    status_code = 500
    default_message = 'Missing Gemini API key. Please set GEMINI_API_KEY in your environment variables.'


class UpstreamRateLimited(StudyPackError):
    status_code = 429
    default_message = 'AI service is temporarily busy. Please try again in a moment.'


class UpstreamAuthOrConfig(StudyPackError):
    status_code = 500
    default_message = 'AI service configuration error. Please contact support.'


class UpstreamTimeout(StudyPackError):
    status_code = 504
    default_message = 'Request timed out. Please try again with shorter content.'


class UpstreamUnavailable(StudyPackError):
    status_code = 503
    default_message = 'AI servers are currently busy. This usually resolves in 1-5 minutes. Please try again.'


class UpstreamError(StudyPackError):
    status_code = 500
    default_message = 'AI service error. Please try again.'


class UpstreamMalformed(StudyPackError):
    status_code = 500
    default_message = 'AI response could not be processed. Please try again with different content.'
