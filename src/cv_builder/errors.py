
# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Exception hierarchy shared by the task operations and the gateway.

Each error carries the taxonomy ``kind`` and the HTTP status the gateway
answers with when the error escapes a task operation.
"""


class CVBuilderError(Exception):
    """Base class for every error raised by the AI orchestration layer."""
    kind = "INTERNAL"
    status = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class ValidationError(CVBuilderError):
    """Bad or missing input. Never retried."""
    kind = "VALIDATION"
    status = 400


class NotConfiguredError(CVBuilderError):
    """No usable AI credential for this request."""
    kind = "NOT_CONFIGURED"
    status = 503


class ProviderError(CVBuilderError):
    """Transport or auth failure while talking to an LLM backend."""
    kind = "PROVIDER"
    status = 422


class ProviderTimeoutError(ProviderError):
    """The backend did not answer before the request deadline."""
    kind = "TIMEOUT"


class ExtractionError(CVBuilderError):
    """Text could not be turned into the expected shape."""
    kind = "EXTRACTION"
    status = 422


class SchemaError(CVBuilderError):
    """Recovered data failed CVDocument validation."""
    kind = "SCHEMA"
    status = 422

    def __init__(self, path: str, message: str = ""):
        self.path = path
        detail = f"{path}: {message}" if path else message
        super().__init__(detail or "Invalid CV data")


class ProcessingError(CVBuilderError):
    """AI output was unusable and the operation has no fallback."""
    kind = "PROCESSING_FAILED"
    status = 422


# Errors a fallback-aware operation absorbs instead of propagating.
RECOVERABLE_ERRORS = (ProviderError, ExtractionError, SchemaError)
