"""Face search service resolving face matches to stored S3 images."""
