from .factories import add_credential, add_response, add_review
from .mock_transport import RecordingRouter

__all__ = ['RecordingRouter', 'add_credential', 'add_response', 'add_review']
