"""Exception types raised at the engine's collaborator boundaries."""


class VarkError(Exception):
    """Base class for all varkmodules errors."""


class ModuleLoadError(VarkError):
    """A module definition could not be read or failed validation."""


class CollaboratorError(VarkError):
    """An external collaborator (store, notifier, session provider) failed."""


class PersistenceError(CollaboratorError):
    """A read or write against the persistence service failed."""


class NotificationError(CollaboratorError):
    """A notification could not be delivered to the notification sink."""
