"""
CloudBox API: upload, list, favorite, trash and delete files kept in S3, with
their metadata in a document store.
"""
