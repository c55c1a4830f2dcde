"""Tests for EmailRepository — all tests use a temporary JSON file."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from email_sender.domain.emails.repository import EmailRepository, StoreError


def read_file(path: Path) -> list:
    return json.loads(path.read_text(encoding="utf-8"))


class TestInitialisation:
    def test_creates_directory_and_empty_history(self, db_path: Path) -> None:
        assert not db_path.parent.exists()
        EmailRepository(db_path)
        assert read_file(db_path) == []

    def test_keeps_existing_history(self, db_path: Path, sample_email: dict) -> None:
        db_path.parent.mkdir(parents=True)
        db_path.write_text(json.dumps([{"id": 1.5, **sample_email}]))

        repo = EmailRepository(db_path)

        assert repo.get_emails()["total"] == 1


class TestAddEmail:
    def test_add_assigns_id_and_timestamp(self, repo: EmailRepository, sample_email: dict) -> None:
        email_id = repo.add_email(sample_email)

        stored = repo.get_email_by_id(str(email_id))
        assert stored["id"] == email_id
        assert stored["sent_at"]
        assert stored["subject"] == "Quarterly report"

    def test_newest_email_comes_first(self, repo: EmailRepository, sample_email: dict) -> None:
        repo.add_email({**sample_email, "subject": "first"})
        repo.add_email({**sample_email, "subject": "second"})

        subjects = [e["subject"] for e in repo.get_emails()["emails"]]
        assert subjects == ["second", "first"]

    def test_file_matches_in_memory_list(self, repo: EmailRepository, db_path: Path, sample_email: dict) -> None:
        first = repo.add_email({**sample_email, "subject": "first"})
        second = repo.add_email({**sample_email, "subject": "Grüße"})
        repo.delete_email_by_id(str(first))
        third = repo.add_email({**sample_email, "subject": "third"})

        assert db_path.read_text(encoding="utf-8") == json.dumps(repo._read(), indent=2, ensure_ascii=False)
        assert [e["id"] for e in repo.get_emails(limit=100)["emails"]] == [third, second]
        assert "Grüße" in db_path.read_text(encoding="utf-8")

    def test_id_is_millisecond_timestamp(self, repo: EmailRepository, sample_email: dict) -> None:
        with patch("email_sender.domain.emails.repository.time.time", return_value=1700000000.0), patch(
            "email_sender.domain.emails.repository.random.random", return_value=0.25
        ):
            email_id = repo.add_email(sample_email)
        assert email_id == 1700000000000.25

    def test_write_failure_raises_store_error(self, repo: EmailRepository, sample_email: dict) -> None:
        with patch.object(Path, "write_text", side_effect=OSError("disk full")):
            with pytest.raises(StoreError):
                repo.add_email(sample_email)


class TestPagination:
    @pytest.fixture
    def filled_repo(self, repo: EmailRepository, sample_email: dict) -> EmailRepository:
        for i in range(25):
            repo.add_email({**sample_email, "subject": f"email {i}"})
        return repo

    def test_first_page(self, filled_repo: EmailRepository) -> None:
        result = filled_repo.get_emails(page=1, limit=10)
        assert len(result["emails"]) == 10
        assert result["emails"][0]["subject"] == "email 24"
        assert result["total"] == 25
        assert result["total_pages"] == 3

    def test_last_partial_page(self, filled_repo: EmailRepository) -> None:
        result = filled_repo.get_emails(page=3, limit=10)
        assert [e["subject"] for e in result["emails"]] == [f"email {i}" for i in range(4, -1, -1)]

    def test_page_past_the_end_is_empty(self, filled_repo: EmailRepository) -> None:
        assert filled_repo.get_emails(page=9, limit=10)["emails"] == []

    def test_empty_store_has_zero_pages(self, repo: EmailRepository) -> None:
        result = repo.get_emails()
        assert result == {"emails": [], "total": 0, "page": 1, "total_pages": 0}


class TestLookupAndDelete:
    def test_get_matches_numeric_string_forms(self, db_path: Path, sample_email: dict) -> None:
        db_path.parent.mkdir(parents=True)
        db_path.write_text(json.dumps([{"id": 1700000000000, **sample_email}]))
        repo = EmailRepository(db_path)

        assert repo.get_email_by_id("1700000000000") is not None
        assert repo.get_email_by_id("1700000000000.0") is not None

    def test_get_unknown_id_returns_none(self, repo: EmailRepository, sample_email: dict) -> None:
        repo.add_email(sample_email)
        assert repo.get_email_by_id("42") is None
        assert repo.get_email_by_id("not-a-number") is None

    def test_delete_removes_only_matching_record(self, repo: EmailRepository, db_path: Path, sample_email: dict) -> None:
        keep_id = repo.add_email({**sample_email, "subject": "keep"})
        drop_id = repo.add_email({**sample_email, "subject": "drop"})

        assert repo.delete_email_by_id(str(drop_id)) is True

        stored = read_file(db_path)
        assert [e["id"] for e in stored] == [keep_id]

    def test_delete_unknown_id_does_not_rewrite_file(self, repo: EmailRepository, sample_email: dict) -> None:
        repo.add_email(sample_email)
        with patch.object(EmailRepository, "_write") as write:
            assert repo.delete_email_by_id("12345") is False
        write.assert_not_called()


class TestCorruptFile:
    def test_invalid_json_reads_as_empty(self, repo: EmailRepository, db_path: Path) -> None:
        db_path.write_text("{not json")
        assert repo.get_emails()["emails"] == []

    def test_non_array_reads_as_empty(self, repo: EmailRepository, db_path: Path) -> None:
        db_path.write_text('{"emails": []}')
        assert repo.get_emails()["total"] == 0

    def test_add_after_corruption_starts_fresh(self, repo: EmailRepository, db_path: Path, sample_email: dict) -> None:
        db_path.write_text("garbage")
        repo.add_email(sample_email)
        assert len(read_file(db_path)) == 1
