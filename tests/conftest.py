import base64
import io
import os
import tempfile
import zipfile

# Settings are read at import time, so point them at scratch locations first
_SCRATCH = tempfile.mkdtemp(prefix="notenova-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_SCRATCH, 'app.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_SCRATCH, "uploads")
os.environ["NOTES_IMPORT_DIR"] = os.path.join(_SCRATCH, "notes")
os.environ["FRONTEND_DIR"] = os.path.join(_SCRATCH, "no-frontend")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["OPENROUTER_API_KEY"] = "test-key"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from database import build_engine, init_db, get_db
from main import app
from providers.base import BaseProvider
from services.ai_service import AIService, get_ai_service
from services.auth_service import AuthService


LONG_TEXT = (
    "Mitochondria are the powerhouse of the cell. Every living organism is built from cells, "
    "and the cytoplasm surrounds the nucleus and the other organelles inside the cell membrane."
)


ONE_PIXEL_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

_CONTENT_TYPES = """<?xml version="1.0" encoding="UTF-8"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
<Default Extension="xml" ContentType="application/xml"/>
<Default Extension="png" ContentType="image/png"/>
<Override PartName="/word/document.xml"
 ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
</Types>"""

_PACKAGE_RELS = """<?xml version="1.0" encoding="UTF-8"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
<Relationship Id="rId1" Target="word/document.xml"
 Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument"/>
</Relationships>"""

_DOCUMENT_RELS = """<?xml version="1.0" encoding="UTF-8"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
<Relationship Id="rIdImage1" Target="media/image1.png"
 Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"/>
</Relationships>"""

_DOCUMENT = """<?xml version="1.0" encoding="UTF-8"?>
<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main"
 xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships"
 xmlns:wp="http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing"
 xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main"
 xmlns:pic="http://schemas.openxmlformats.org/drawingml/2006/picture">
<w:body>{body}</w:body>
</w:document>"""

_IMAGE_PARAGRAPH = """<w:p><w:r><w:drawing><wp:inline>
<wp:docPr id="1" name="Picture 1" descr="dot"/>
<a:graphic><a:graphicData uri="http://schemas.openxmlformats.org/drawingml/2006/picture">
<pic:pic><pic:blipFill><a:blip r:embed="rIdImage1"/></pic:blipFill></pic:pic>
</a:graphicData></a:graphic>
</wp:inline></w:drawing></w:r></w:p>"""


def make_docx(paragraphs, with_image=False) -> bytes:
    """Minimal Word document: one text run per paragraph, optionally a 1x1 PNG after them."""
    body = "".join(f"<w:p><w:r><w:t>{text}</w:t></w:r></w:p>" for text in paragraphs)
    if with_image:
        body += _IMAGE_PARAGRAPH

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as docx:
        docx.writestr("[Content_Types].xml", _CONTENT_TYPES)
        docx.writestr("_rels/.rels", _PACKAGE_RELS)
        docx.writestr("word/document.xml", _DOCUMENT.format(body=body))
        docx.writestr("word/_rels/document.xml.rels", _DOCUMENT_RELS)
        if with_image:
            docx.writestr("word/media/image1.png", ONE_PIXEL_PNG)
    return buffer.getvalue()


class FakeProvider(BaseProvider):
    """In-memory stand-in for the hosted model."""

    def __init__(self, reply="A concise summary of the note.", models=None, error=None):
        self.reply = reply
        self.models = ["fake-model"] if models is None else models
        self.error = error
        self.calls = []
        self.model_checks = 0

    @property
    def name(self) -> str:
        return "fake"

    @property
    def model(self) -> str:
        return "fake-model"

    async def chat(self, messages, max_tokens=1000, temperature=0.7):
        self.calls.append(messages[-1]["content"])
        if self.error:
            return {"text": None, "provider": self.name, "model": self.model, "status": "failed", "error": self.error}
        reply = self.reply(messages[-1]["content"]) if callable(self.reply) else self.reply
        return {"text": reply, "provider": self.name, "model": self.model, "status": "success", "error": None}

    async def list_models(self):
        self.model_checks += 1
        return self.models


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'notenova.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def ai_service(provider):
    return AIService(provider, model_label="Fake Model")


@pytest.fixture
def client(session_factory, ai_service):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_service] = lambda: ai_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Register a user directly and return (user dict, auth headers)."""
    def _make(username="ada", email=None, password="secret123"):
        session = AuthService.register(db, username, email or f"{username}@notenova.io", password)
        return session["user"], {"Authorization": f"Bearer {session['token']}"}
    return _make


@pytest.fixture
def auth_headers(make_user):
    _, headers = make_user()
    return headers
