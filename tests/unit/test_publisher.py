"""Unit tests for hitexport.publisher.ArtifactPublisher.

Covers:
- path_for: deterministic per-tenant path under the export dir
- publish: rename + SHA-256, overwrite of a previous artifact
- publish: PublishError removes the temp file, DigestError after a successful rename
- verify: digest comparison
"""

from __future__ import annotations

import hashlib
import os

import pytest

from hitexport.errors import DigestError, PublishError
from hitexport.models.hits import Tenant
from hitexport.publisher import ArtifactPublisher


@pytest.fixture
def publisher(export_dir) -> ArtifactPublisher:
    return ArtifactPublisher(export_dir)


class TestArtifactPublisher:
    def test_path_for(self, publisher, export_dir, tenant):
        assert publisher.path_for(tenant) == export_dir / "export-example.csv.gz"

    def test_publish_moves_and_hashes(self, publisher, export_dir, tenant):
        temp = export_dir / "export-example-abc.csv.gz.tmp"
        temp.write_bytes(b"payload")

        path, digest = publisher.publish(temp, tenant)

        assert path == export_dir / "export-example.csv.gz"
        assert path.read_bytes() == b"payload"
        assert not temp.exists()
        assert digest == hashlib.sha256(b"payload").hexdigest()

    def test_publish_replaces_previous_artifact(self, publisher, export_dir, tenant):
        (export_dir / "export-example.csv.gz").write_bytes(b"old")
        temp = export_dir / "t.tmp"
        temp.write_bytes(b"new")

        path, _ = publisher.publish(temp, tenant)

        assert path.read_bytes() == b"new"

    def test_other_tenants_untouched(self, publisher, export_dir, tenant):
        other = export_dir / "export-other.csv.gz"
        other.write_bytes(b"other")
        temp = export_dir / "t.tmp"
        temp.write_bytes(b"new")

        publisher.publish(temp, tenant)

        assert other.read_bytes() == b"other"

    def test_rename_failure_raises_publish_error(self, publisher, export_dir, tenant, monkeypatch):
        final = export_dir / "export-example.csv.gz"
        final.write_bytes(b"old")
        temp = export_dir / "t.tmp"
        temp.write_bytes(b"new")

        def failing_replace(src, dst):
            raise OSError("Read-only file system")

        monkeypatch.setattr(os, "replace", failing_replace)

        with pytest.raises(PublishError):
            publisher.publish(temp, tenant)

        assert not temp.exists()
        assert final.read_bytes() == b"old"

    def test_hash_failure_raises_digest_error(self, publisher, export_dir, tenant, monkeypatch):
        temp = export_dir / "t.tmp"
        temp.write_bytes(b"new")

        def failing_checksum(path, *args, **kwargs):
            raise OSError("I/O error")

        monkeypatch.setattr("hitexport.publisher.file_checksum", failing_checksum)

        with pytest.raises(DigestError):
            publisher.publish(temp, tenant)

        # The artifact is in place even though it could not be hashed
        assert (export_dir / "export-example.csv.gz").read_bytes() == b"new"

    def test_verify(self, publisher, export_dir, tenant):
        temp = export_dir / "t.tmp"
        temp.write_bytes(b"abc")
        path, digest = publisher.publish(temp, tenant)

        assert publisher.verify(path, digest) is True
        assert publisher.verify(path, "0" * 64) is False
        assert publisher.verify(export_dir / "missing", digest) is False

    def test_unsafe_tenant_code_rejected(self, publisher):
        with pytest.raises(ValueError):
            publisher.path_for(Tenant(id=2, code="../escape"))
