# cli.py
import click
import logging

from cloudbox_api.config.settings import get_settings
from cloudbox_api.dependencies import build_reconciliation_service

# Configure logging
logger = logging.getLogger(__name__)

@click.group()
def cli():
    """CLI commands for the CloudBox API"""
    pass

@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    print("Current Configuration:")
    print(f"  Deployment Mode: {settings.deployment_mode}")
    print(f"  AWS Region: {settings.aws_region}")
    print(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    print(f"  S3 Bucket: {settings.s3_bucket_name}")
    print(f"  Presigned URL Expiry: {settings.presign_expiry_seconds}s")
    print(f"  Metadata Backend: {settings.metadata_backend}")
    if settings.metadata_backend == "sqlite":
        print(f"  SQLite Path: {settings.sqlite_db_path}")
    print(f"  Billing Configured: {'yes' if settings.stripe_secret_key else 'no'}")
    print(f"  Client URL: {settings.client_url}")

@cli.command()
def init_db():
    """Create metadata collections and indexes"""
    service = build_reconciliation_service(get_settings())
    service.file_service.init()
    print("✅ Metadata store initialized")

@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind")
@click.option("--port", type=int, default=None, help="Port to listen on (defaults to API_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host, port, reload):
    """Run the API with uvicorn"""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "cloudbox_api.main:create_app",
        factory=True,
        host=host,
        port=port or settings.api_port,
        reload=reload,
    )

@cli.command()
@click.option("--grace-seconds", type=int, default=None,
              help="Ignore blobs younger than this (defaults to ORPHAN_GRACE_SECONDS)")
def report_orphans(grace_seconds):
    """List blobs that have no metadata record. Nothing is deleted."""
    service = build_reconciliation_service(get_settings())
    service.file_service.init()
    if grace_seconds is not None:
        service.orphan_grace_seconds = grace_seconds

    orphans = service.find_orphaned_blobs()
    if not orphans:
        print("No orphaned blobs found")
        return

    print(f"Found {len(orphans)} orphaned blob(s):")
    for entry in orphans:
        print(f"  {entry.key}  {entry.size} bytes  last modified {entry.last_modified.isoformat()}")

if __name__ == "__main__":
    cli()
