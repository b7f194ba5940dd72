# Services package init
"""
BookingDesk Backend — Services Layer
======================================

What:  Everything between the HTTP routes and the outside world.

Service Inventory:
    - DocumentStore (abstract) / SQLDocumentStore: record persistence
    - ObjectStore (abstract) / FilesystemObjectStore / MinioObjectStore: blobs
    - IdentityVerifier (abstract) / HMACTokenVerifier: bearer credentials
    - Repository[T]: typed record access with error translation
    - ImageManager: image keys, URLs, upload and fetch

Collaborators are built once by create_app() and never replaced, so every
service here is safe to share between concurrent requests.
"""
