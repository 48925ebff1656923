"""Document stores: local directory and S3 (mocked with moto)."""

import asyncio

import boto3
import pytest
from moto import mock_aws

from screening.errors import FetchFailed
from resume_triage.document_store import LocalDocumentStore, S3DocumentStore, create_document_store, make_key


def test_keys_are_unique_and_sanitized():
    first, second = make_key("../My CV.pdf"), make_key("../My CV.pdf")
    assert first != second
    assert first.startswith("resumes/")
    assert first.endswith("-My_CV.pdf")
    assert ".." not in first


def test_local_round_trip(tmp_path):
    store = LocalDocumentStore(tmp_path)

    async def go():
        key = await store.put(b"%PDF-1.4 data", "cv.pdf", "application/pdf")
        data = await store.get(key)
        await store.delete(key)
        return data

    assert asyncio.run(go()) == b"%PDF-1.4 data"


def test_local_missing_key_fails(tmp_path):
    with pytest.raises(FetchFailed):
        asyncio.run(LocalDocumentStore(tmp_path).get("resumes/nope.pdf"))


def test_local_rejects_keys_outside_root(tmp_path):
    with pytest.raises(FetchFailed):
        asyncio.run(LocalDocumentStore(tmp_path / "docs").get("../secret.txt"))


@pytest.fixture
def aws_credentials(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@mock_aws
def test_s3_round_trip(aws_credentials):
    client = boto3.client("s3", region_name="us-east-1")
    client.create_bucket(Bucket="resumes-test")
    store = S3DocumentStore("resumes-test", client=client)

    async def go():
        key = await store.put(b"docx bytes", "cv.docx", "application/octet-stream")
        return key, await store.get(key)

    key, data = asyncio.run(go())
    assert data == b"docx bytes"
    head = client.head_object(Bucket="resumes-test", Key=key)
    assert head["ContentType"] == "application/octet-stream"


@mock_aws
def test_s3_missing_key_fails(aws_credentials):
    client = boto3.client("s3", region_name="us-east-1")
    client.create_bucket(Bucket="resumes-test")
    store = S3DocumentStore("resumes-test", client=client)
    with pytest.raises(FetchFailed):
        asyncio.run(store.get("resumes/missing.pdf"))


def test_factory(tmp_path):
    local = create_document_store({"document_store": "local", "document_dir": str(tmp_path)})
    assert isinstance(local, LocalDocumentStore)
    with pytest.raises(ValueError):
        create_document_store({"document_store": "s3", "s3_bucket": "", "aws_region": "us-east-1"})
    with pytest.raises(ValueError):
        create_document_store({"document_store": "ftp"})
