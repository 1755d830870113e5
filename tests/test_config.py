from blobfs.adapter import BlobStorageAdapter
from blobfs.azureblob import AzureBlobContainer
from blobfs.config import load_config
from blobfs.config import open_filesystem
from blobfs.s3client import S3BlobContainer
from conftest import ACCOUNT_KEY
from moto import mock_aws

import boto3
import pytest
import ZConfig


@pytest.fixture
def s3_env():
    with mock_aws():
        boto3.client("s3", region_name="us-east-1").create_bucket(Bucket="test-bucket")
        yield


class TestLoadConfig:
    def test_default_values(self):
        config = load_config("container-name media\n")
        assert config.backend == "azure"
        assert config.container_name == "media"
        assert config.prefix == ""
        assert config.use_ssl is True
        assert config.addressing_style == "auto"
        assert config.connect_timeout == 60
        assert config.read_timeout == 60
        assert config.connection_string is None

    def test_all_s3_options(self):
        config = load_config(
            """\
            backend s3
            container-name test-bucket
            prefix myprefix
            endpoint-url http://localhost:9000
            region us-east-1
            access-key minioadmin
            secret-key minioadmin
            use-ssl false
            addressing-style path
            connect-timeout 5
            read-timeout 30
            """
        )
        assert config.backend == "s3"
        assert config.endpoint_url == "http://localhost:9000"
        assert config.use_ssl is False
        assert config.connect_timeout == 5
        assert config.read_timeout == 30

    def test_container_name_required(self):
        with pytest.raises(ZConfig.ConfigurationError):
            load_config("backend s3\n")


class TestOpenFilesystem:
    def test_azure_connection_string(self):
        adapter = open_filesystem(
            "container-name media\n"
            "connection-string DefaultEndpointsProtocol=https;"
            f"AccountName=devaccount;AccountKey={ACCOUNT_KEY};"
            "EndpointSuffix=core.windows.net\n"
        )
        assert isinstance(adapter, BlobStorageAdapter)
        assert isinstance(adapter._container, AzureBlobContainer)
        assert adapter._container.name == "media"

    def test_azure_account_key(self):
        adapter = open_filesystem(
            load_config(
                "container-name media\n"
                "account-url https://devaccount.blob.core.windows.net\n"
                "account-name devaccount\n"
                f"account-key {ACCOUNT_KEY}\n"
            )
        )
        assert isinstance(adapter._container, AzureBlobContainer)

    def test_azure_needs_credentials(self):
        with pytest.raises(ValueError):
            open_filesystem("container-name media\n")

    def test_s3(self, s3_env):
        adapter = open_filesystem(
            "backend s3\ncontainer-name test-bucket\nregion us-east-1\nprefix ns\n"
        )
        assert isinstance(adapter._container, S3BlobContainer)
        assert adapter._container.name == "test-bucket"
        assert adapter._container._prefix == "ns"

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            open_filesystem("backend gcs\ncontainer-name media\n")
