from functools import lru_cache

from fastapi import Depends

import config
from services.oauth import GoogleIdentityProvider, IdentityProvider
from storage.base import BaseStorage
from storage.local import LocalStorage
from storage.s3 import S3Storage


@lru_cache(maxsize=1)
def get_storage_manager_instance() -> BaseStorage:
    storage_type = config.STORAGE_TYPE
    if storage_type == "s3":
        return S3Storage()
    elif storage_type == "local":
        return LocalStorage()
    else:
        raise ValueError(f"Unknown storage type: {storage_type}")


def get_storage_manager(storage: BaseStorage = Depends(get_storage_manager_instance)) -> BaseStorage:
    return storage


@lru_cache(maxsize=1)
def get_identity_provider_instance() -> IdentityProvider:
    return GoogleIdentityProvider()


def get_identity_provider(provider: IdentityProvider = Depends(get_identity_provider_instance)) -> IdentityProvider:
    return provider
