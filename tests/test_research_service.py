# =============================================================================
# tests/test_research_service.py - Research Sharing Tests
# =============================================================================
# Tests for ResearchService against the in-memory gateway:
# - The board shows active posts, newest first, with field/text filters
# - Posts are created active with cleaned-up tags
# - Collaboration requests: no self-requests, active posts only
# =============================================================================

from uuid import uuid4

import pytest

from app.exceptions import (
    ForbiddenError,
    InvalidStateError,
    PersistenceError,
    ResearchNotFoundError,
    ValidationError,
)
from core.services.research_service import ResearchService


@pytest.fixture
def author(gateway):
    return gateway.add_profile(full_name="Rita Researcher", institution="State University")


@pytest.fixture
def post(gateway, author):
    return gateway.add_research(author["id"])


# =============================================================================
# list_research / get_research
# =============================================================================

class TestReadResearch:
    """Tests for the research board and detail lookups."""

    def test_active_newest_first(self, gateway, author):
        older = gateway.add_research(author["id"])
        gateway.add_research(author["id"], status="archived")
        newer = gateway.add_research(author["id"])

        posts = ResearchService.list_research()

        assert [p["id"] for p in posts] == [newer["id"], older["id"]]
        assert posts[0]["author"]["institution"] == "State University"

    def test_field_filter(self, gateway, author):
        gateway.add_research(author["id"], field="Biology")
        cs = gateway.add_research(author["id"], field="Computer Science")

        posts = ResearchService.list_research(field="Computer Science")

        assert [p["id"] for p in posts] == [cs["id"]]

    def test_search_title_and_abstract(self, gateway, author):
        by_title = gateway.add_research(author["id"], title="Coral Reef Bleaching")
        by_abstract = gateway.add_research(author["id"], title="Ocean study", abstract="Effects on CORAL growth")
        gateway.add_research(author["id"], title="Bird migration", abstract="Tracking swallows")

        posts = ResearchService.list_research(search="coral")

        assert {p["id"] for p in posts} == {by_title["id"], by_abstract["id"]}

    def test_get_missing(self, gateway):
        with pytest.raises(ResearchNotFoundError):
            ResearchService.get_research(uuid4())

    def test_list_failure(self, gateway):
        gateway.fail("list_research")

        with pytest.raises(PersistenceError):
            ResearchService.list_research()


# =============================================================================
# create_research
# =============================================================================

class TestCreateResearch:
    """Tests for ResearchService.create_research."""

    def test_creates_active_post(self, gateway, author):
        research = ResearchService.create_research(
            user_id=author["id"],
            title="  Sparse attention  ",
            abstract="We compare three variants",
            field="Computer Science",
            tags="machine learning, , nlp ",
            document_url="https://arxiv.org/abs/2401.00001",
        )

        assert research["status"] == "active"
        assert research["user_id"] == author["id"]
        assert research["title"] == "Sparse attention"
        assert research["tags"] == ["machine learning", "nlp"]
        assert research["id"] in gateway.research

    def test_tags_optional(self, gateway, author):
        research = ResearchService.create_research(author["id"], "Title", "Abstract", "Biology")

        assert research["tags"] == []
        assert research["document_url"] is None

    @pytest.mark.parametrize("overrides,field", [
        ({"title": "  "}, "title"),
        ({"abstract": ""}, "abstract"),
        ({"field": ""}, "field"),
        ({"document_url": "ftp://files.example.org/paper.pdf"}, "document_url"),
    ])
    def test_invalid_post(self, gateway, author, overrides, field):
        args = {"title": "Title", "abstract": "Abstract", "field": "Biology", **overrides}

        with pytest.raises(ValidationError) as exc_info:
            ResearchService.create_research(user_id=author["id"], **args)

        assert exc_info.value.details["field"] == field
        assert gateway.research == {}


# =============================================================================
# request_collaboration
# =============================================================================

class TestRequestCollaboration:
    """Tests for ResearchService.request_collaboration."""

    def test_sends_pending_request(self, gateway, post, freelancer):
        request = ResearchService.request_collaboration(
            post["id"], freelancer["id"], "I can run the experiments"
        )

        assert request["status"] == "pending"
        assert request["research_id"] == post["id"]
        assert request["requester_id"] == freelancer["id"]
        assert list(gateway.collaborations) == [request["id"]]

    def test_author_cannot_request_own_research(self, gateway, post, author):
        with pytest.raises(ForbiddenError):
            ResearchService.request_collaboration(post["id"], author["id"], "Me too")

        assert gateway.collaborations == {}

    def test_message_required(self, gateway, post, freelancer):
        with pytest.raises(ValidationError):
            ResearchService.request_collaboration(post["id"], freelancer["id"], "   ")

        assert gateway.collaborations == {}

    def test_archived_post(self, gateway, author, freelancer):
        archived = gateway.add_research(author["id"], status="archived")

        with pytest.raises(InvalidStateError):
            ResearchService.request_collaboration(archived["id"], freelancer["id"], "Still going?")

    def test_missing_post(self, gateway, freelancer):
        with pytest.raises(ResearchNotFoundError):
            ResearchService.request_collaboration(uuid4(), freelancer["id"], "Hello")
