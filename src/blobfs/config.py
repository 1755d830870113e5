from blobfs.adapter import BlobStorageAdapter

import io
import ZConfig


SCHEMA = """\
<schema>
  <description>Blob filesystem configuration.</description>
  <key name="backend" default="azure"/>
  <key name="container-name" required="yes"/>

  <!-- azure -->
  <key name="connection-string"/>
  <key name="account-url"/>
  <key name="account-name"/>
  <key name="account-key"/>

  <!-- s3 -->
  <key name="prefix" default=""/>
  <key name="endpoint-url"/>
  <key name="region"/>
  <key name="access-key"/>
  <key name="secret-key"/>
  <key name="use-ssl" datatype="boolean" default="true"/>
  <key name="addressing-style" default="auto"/>
  <key name="connect-timeout" datatype="integer" default="60"/>
  <key name="read-timeout" datatype="integer" default="60"/>
  <key name="sse-customer-key"/>
</schema>
"""

_schema = None


def _get_schema():
    global _schema
    if _schema is None:
        _schema = ZConfig.loadSchemaFile(io.StringIO(SCHEMA))
    return _schema


def load_config(text):
    """Parse configuration text into a ZConfig section object."""
    config, _handler = ZConfig.loadConfigFile(_get_schema(), io.StringIO(text))
    return config


def open_container(config):
    if config.backend == "azure":
        from blobfs.azureblob import AzureBlobContainer

        if config.connection_string:
            return AzureBlobContainer.from_connection_string(
                config.connection_string, config.container_name
            )
        if config.account_url and config.account_name and config.account_key:
            return AzureBlobContainer.from_account(
                config.account_url,
                config.container_name,
                config.account_name,
                config.account_key,
            )
        raise ValueError(
            "azure backend needs connection-string, or account-url "
            "with account-name and account-key"
        )
    if config.backend == "s3":
        from blobfs.s3client import S3BlobContainer

        return S3BlobContainer(
            bucket_name=config.container_name,
            prefix=config.prefix,
            endpoint_url=config.endpoint_url,
            region_name=config.region,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            use_ssl=config.use_ssl,
            addressing_style=config.addressing_style,
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            sse_customer_key=config.sse_customer_key,
        )
    raise ValueError(f"unknown backend {config.backend!r}, expected azure or s3")


def open_filesystem(config):
    """Build a BlobStorageAdapter from a loaded configuration."""
    if isinstance(config, str):
        config = load_config(config)
    return BlobStorageAdapter(open_container(config))
