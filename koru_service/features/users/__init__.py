from koru_service.features.users.service import UserService

__all__ = ["UserService"]
