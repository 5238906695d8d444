"""
值对象与实体测试：ValidationOutcome / 元信息 / ValidationJob / ProductLink
"""

from datetime import datetime

import pytest

from outfit_feed.link_validation.domain.entity.product_link import ProductLink, hostname_of
from outfit_feed.link_validation.domain.domain_event.link_validation_event import LinkSubmittedEvent
from outfit_feed.link_validation.domain.exceptions import (
    BlacklistedDomainError,
    HttpStatusError,
    MalformedUrlError,
    NetworkError,
    UnsupportedContentTypeError,
)
from outfit_feed.link_validation.domain.value_objects.link_status import LinkStatus, ValidationState
from outfit_feed.link_validation.domain.value_objects.product_metadata import ProductMetadata
from outfit_feed.link_validation.domain.value_objects.validation_job import ValidationJob
from outfit_feed.link_validation.domain.value_objects.validation_metadata import (
    FailureMetadata,
    SuccessMetadata,
    metadata_from_dict,
)
from outfit_feed.link_validation.domain.value_objects.validation_outcome import ValidationOutcome

NOW = datetime(2024, 5, 1, 12, 0, 0)


class TestValidationOutcome:

    def test_valid_outcome_fields(self):
        outcome = ValidationOutcome.valid(
            "shop.com", ProductMetadata(title="Red Jacket", price="$49.99"), NOW
        )
        fields = outcome.to_update_fields()

        assert fields["status"] == LinkStatus.VALID
        assert fields["is_valid"] is True
        assert fields["domain"] == "shop.com"
        assert isinstance(fields["metadata"], SuccessMetadata)
        assert fields["metadata"].title == "Red Jacket"
        assert outcome.error is None

    @pytest.mark.parametrize("state", [
        ValidationState.BLACKLISTED,
        ValidationState.NETWORK_FAILED,
        ValidationState.NON_HTML,
        ValidationState.FAULTED,
    ])
    def test_invalid_outcome_never_writes_domain(self, state):
        outcome = ValidationOutcome.invalid(state, "boom", NOW)
        fields = outcome.to_update_fields()

        assert fields["status"] == LinkStatus.INVALID
        assert fields["is_valid"] is False
        assert "domain" not in fields
        assert outcome.error == "boom"

    def test_invalid_with_valid_state_rejected(self):
        with pytest.raises(ValueError):
            ValidationOutcome.invalid(ValidationState.VALID, "x", NOW)


class TestValidationMetadata:

    def test_success_to_dict(self):
        meta = SuccessMetadata(title="T", image=None, price="9.99", validated_at=NOW)
        assert meta.to_dict() == {
            "title": "T",
            "image": None,
            "price": "9.99",
            "validatedAt": "2024-05-01T12:00:00",
        }

    def test_failure_to_dict(self):
        meta = FailureMetadata(error="HTTP 404", validated_at=NOW)
        assert meta.to_dict() == {"error": "HTTP 404", "validatedAt": "2024-05-01T12:00:00"}

    def test_from_dict_picks_variant(self):
        assert isinstance(metadata_from_dict({"error": "x", "validatedAt": NOW.isoformat()}), FailureMetadata)
        success = metadata_from_dict({"title": "T", "validatedAt": "2024-05-01T12:00:00Z"})
        assert isinstance(success, SuccessMetadata)
        assert success.validated_at.year == 2024
        assert metadata_from_dict(None) is None
        assert metadata_from_dict({}) is None

    def test_product_metadata_is_clipped(self):
        meta = ProductMetadata.clipped(title="a" * 500, image="b" * 900, price="  " + "1" * 80)
        assert len(meta.title) == 200
        assert len(meta.image) == 500
        assert len(meta.price) == 50

    def test_blank_fields_become_none(self):
        meta = ProductMetadata.clipped(title="   ", image=None, price="")
        assert meta == ProductMetadata()


class TestValidationJob:

    def test_payload_round_trip_uses_wire_keys(self):
        job = ValidationJob(link_id="abc", url="http://shop.com/p")
        assert job.to_payload() == {"linkId": "abc", "url": "http://shop.com/p"}
        assert ValidationJob.from_payload(job.to_payload()) == job

    def test_snake_case_payload_accepted(self):
        assert ValidationJob.from_payload({"link_id": "1", "url": "u"}).link_id == "1"

    @pytest.mark.parametrize("payload", [{}, {"url": "http://x"}, {"linkId": "1"}])
    def test_invalid_payload(self, payload):
        with pytest.raises(ValueError):
            ValidationJob.from_payload(payload)


class TestExceptions:

    def test_messages_and_states(self):
        assert str(MalformedUrlError("ftp://x")) == "Invalid URL: ftp://x"
        assert MalformedUrlError("x").state == ValidationState.NETWORK_FAILED
        assert BlacklistedDomainError("scam.com").message == "Domain blacklisted"
        assert BlacklistedDomainError().state == ValidationState.BLACKLISTED
        assert HttpStatusError(404).message == "HTTP 404"
        assert isinstance(HttpStatusError(500), NetworkError)
        assert UnsupportedContentTypeError("application/json").message == "Not HTML (application/json)"
        assert UnsupportedContentTypeError("").state == ValidationState.NON_HTML
        assert "missing" in UnsupportedContentTypeError("").message


class TestProductLink:

    def test_submit_creates_pending_link(self):
        link = ProductLink.submit("https://WWW.Shop.com/item", outfit_id="outfit-1")

        assert link.status == LinkStatus.PENDING
        assert link.is_pending
        assert link.is_valid is False
        assert link.domain == "www.shop.com"
        assert link.metadata is None

        events = link.get_uncommitted_events()
        assert len(events) == 1
        assert isinstance(events[0], LinkSubmittedEvent)
        assert events[0].link_id == link.id
        assert events[0].data == {"url": "https://WWW.Shop.com/item", "outfit_id": "outfit-1"}

        link.clear_events()
        assert link.get_uncommitted_events() == []

    def test_submit_tolerates_garbage_url(self):
        link = ProductLink.submit("not a url")
        assert link.domain == ""

    def test_is_valid_follows_status(self):
        link = ProductLink(id="1", url="u", status=LinkStatus.VALID)
        assert link.is_valid
        link.status = LinkStatus.INVALID
        assert not link.is_valid

    def test_to_dict_shape(self):
        link = ProductLink(
            id="1", url="http://a.com", domain="a.com", outfit_id="o",
            metadata=FailureMetadata(error="HTTP 404", validated_at=NOW),
            status=LinkStatus.INVALID, created_at=NOW, updated_at=NOW
        )
        assert link.to_dict() == {
            "id": "1",
            "outfitId": "o",
            "url": "http://a.com",
            "domain": "a.com",
            "status": "invalid",
            "isValid": False,
            "metadata": {"error": "HTTP 404", "validatedAt": "2024-05-01T12:00:00"},
            "createdAt": "2024-05-01T12:00:00",
            "updatedAt": "2024-05-01T12:00:00",
        }

    def test_hostname_of(self):
        assert hostname_of("http://Shop.Example.com:8080/p?q=1") == "shop.example.com"
        assert hostname_of("http://[::1") == ""
        assert hostname_of("") == ""
