
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
HTTP surface: the single AI gateway endpoint plus health and export.
"""

import base64
import binascii
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response

from cv_builder.config import Settings
from cv_builder.errors import SchemaError
from cv_builder.export import render_cv, render_letter
from cv_builder.gateway import INTERNAL_MESSAGE, Gateway, build_gateway
from cv_builder.providers import ProviderAdapter

logger = logging.getLogger(__name__)

NO_STORE = {"Cache-Control": "no-store"}
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _json(body: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers=NO_STORE)


def create_app(
    settings: Optional[Settings] = None,
    adapter: Optional[ProviderAdapter] = None,
    gateway: Optional[Gateway] = None,
) -> FastAPI:
    """
    Build the application. The provider adapter (and with it the managed
    Gemini client) is created once here and shared by every request.
    """
    settings = settings or Settings.from_env()
    gateway = gateway or build_gateway(settings, adapter)

    app = FastAPI(title="CV Builder AI Gateway")
    app.state.gateway = gateway

    if not gateway.adapter.is_configured():
        logger.warning("GOOGLE_GENAI_API_KEY not set; AI is only available with a user-supplied key.")

    @app.get("/healthz")
    def health():
        return _json({"ok": True, "aiConfigured": gateway.adapter.is_configured()})

    @app.post("/api/ai")
    async def ai(request: Request):
        try:
            data = await request.json()
        except ValueError:
            return _json({"error": "Request body must be JSON."}, 400)
        if not isinstance(data, dict):
            return _json({"error": "Request body must be a JSON object."}, 400)

        try:
            envelope = await run_in_threadpool(
                gateway.handle, data.get("action"), data.get("payload"), data.get("config")
            )
        except Exception:
            logger.exception("/api/ai error")
            return _json({"error": INTERNAL_MESSAGE}, 500)
        return _json(envelope.body, envelope.status)

    @app.post("/api/export")
    async def export(request: Request):
        try:
            data = await request.json()
        except ValueError:
            return _json({"error": "Request body must be JSON."}, 400)
        if not isinstance(data, dict):
            return _json({"error": "Request body must be a JSON object."}, 400)

        photo = None
        if data.get("photo"):
            try:
                photo = base64.b64decode(data["photo"], validate=True)
            except (binascii.Error, TypeError, ValueError):
                return _json({"error": "Photo must be base64 encoded."}, 400)

        letter = data.get("letter")
        if letter is not None and not isinstance(letter, str):
            return _json({"error": "Letter must be a string."}, 400)

        try:
            if letter:
                content = await run_in_threadpool(render_letter, data.get("cv"), letter)
                filename = "motivation-letter.docx"
            else:
                content = await run_in_threadpool(render_cv, data.get("cv"), photo)
                filename = "cv.docx"
        except SchemaError as e:
            return _json({"error": f"Invalid CV data: {e.message}"}, 400)

        return Response(
            content,
            media_type=DOCX_MEDIA_TYPE,
            headers={**NO_STORE, "Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return app
