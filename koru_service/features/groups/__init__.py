from koru_service.features.groups.service import GroupService

__all__ = ["GroupService"]
