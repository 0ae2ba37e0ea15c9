"""
Shared fixtures: in-memory database, users and a scripted LLM gateway.
"""

import json
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  (registers tables)
from app.database import Base
from app.models import User, UserRole
from app.services.job_store import JobStore
from app.services.llm_gateway import LLMError

PERSONA_MARKER = "You are an expert at analyzing freelance marketplace client personas"
ROUTER_MARKER = "You are a Senior Architect acting as a Router"
EXTRACTOR_MARKER = "You are an Expert in "
PROPOSAL_MARKER = "You are a high-end consultant"
CRITIC_MARKER = "You are a Senior Copy Editor"
RESUME_MARKER = "You are an expert Resume Writer"

DEFAULT_PERSONA = {
    "technicalLevel": "TECHNICAL",
    "tone": "PROFESSIONAL",
    "urgency": "MEDIUM",
    "hasBudget": True,
    "ambiguityLevel": "LOW",
}

DEFAULT_ROUTING = {
    "primaryDomain": "Fullstack",
    "secondaryDomains": [],
    "confidence": 0.9,
}


def matrix_payload(**overrides) -> Dict[str, Any]:
    data = {
        "explicit": ["React dashboard", "Node backend"],
        "implied": ["REST API"],
        "constraints": [],
        "ambiguities": ["Hosting not specified"],
        "risks": [],
        "clarifyingQuestions": [{"question": "Which charts?", "type": "MUST_ASK"}],
    }
    data.update(overrides)
    return data


class ScriptedGateway:
    """
    Stand-in for LLMGateway that answers by prompt type.

    Each response may be a dict (returned as JSON), a string, or an
    exception instance (raised).
    """

    def __init__(
        self,
        persona: Any = None,
        routing: Any = None,
        matrices: Optional[Dict[str, Any]] = None,
        proposal: Any = "Hello,\n\nI can build this.\n\nBest regards",
        refined: Any = "Hello,\n\nI will build this.\n\nBest regards",
        resume: Any = "PROFESSIONAL SUMMARY\n\nFrontend lead with six years of React.",
        embedding: Optional[List[float]] = None,
    ):
        self.persona = DEFAULT_PERSONA if persona is None else persona
        self.routing = DEFAULT_ROUTING if routing is None else routing
        self.matrices = matrices or {}
        self.proposal = proposal
        self.refined = refined
        self.resume = resume
        self.embedding = embedding or [0.1, 0.2, 0.3]
        self.prompts: List[str] = []
        self.embedded: List[str] = []

    @staticmethod
    def _respond(value: Any) -> str:
        if isinstance(value, Exception):
            raise value
        if isinstance(value, dict):
            return json.dumps(value)
        return value

    def count(self, marker: str) -> int:
        return sum(1 for p in self.prompts if p.startswith(marker))

    async def generate_content(self, prompt, json_mode=False, model=None, temperature=None):
        self.prompts.append(prompt)
        if prompt.startswith(PERSONA_MARKER):
            return self._respond(self.persona)
        if prompt.startswith(ROUTER_MARKER):
            return self._respond(self.routing)
        if prompt.startswith(EXTRACTOR_MARKER):
            domain = prompt[len(EXTRACTOR_MARKER):].split(".", 1)[0]
            return self._respond(self.matrices.get(domain, matrix_payload()))
        if prompt.startswith(PROPOSAL_MARKER):
            return self._respond(self.proposal)
        if prompt.startswith(CRITIC_MARKER):
            return self._respond(self.refined)
        if prompt.startswith(RESUME_MARKER):
            return self._respond(self.resume)
        raise LLMError("Unexpected prompt")

    async def generate_embedding(self, text):
        self.embedded.append(text)
        return list(self.embedding)


@pytest_asyncio.fixture
async def session_factory():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def make_user(session_factory, email: str, domain: Optional[str] = None, role: str = UserRole.USER.value) -> User:
    async with session_factory() as session:
        user = User(email=email, name=email.split("@")[0], role=role, domain=domain)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest_asyncio.fixture
async def fullstack_user(session_factory):
    return await make_user(session_factory, "fullstack@example.com", domain="Fullstack")


@pytest_asyncio.fixture
async def ai_user(session_factory):
    return await make_user(session_factory, "ai@example.com", domain="AI_ML")


@pytest_asyncio.fixture
async def super_admin(session_factory):
    return await make_user(session_factory, "admin@example.com", role=UserRole.SUPER_ADMIN.value)


@pytest.fixture
def gateway():
    return ScriptedGateway()


async def submit(session_factory, user: User, content: str = "Need a React dashboard with Node backend") -> str:
    async with session_factory() as session:
        job = await JobStore(session).create_job(user.id, "TEXT", content, None)
        return job.id
