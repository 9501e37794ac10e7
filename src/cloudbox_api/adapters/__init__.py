"""
Adapter layer for the CloudBox API.

Contains the blob store adapter over S3, which works against moto in local
modes and real S3 in production.
"""
