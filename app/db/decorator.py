from typing import Any, Callable, Type, TypeVar

R = TypeVar("R")


def repository(model_class: Type[Any]) -> Callable[[Type[R]], Type[R]]:
    """
    Binds a repository class to the entity it manages.
    """

    def decorator(repository_class: Type[R]) -> Type[R]:
        setattr(repository_class, "model_class", model_class)
        return repository_class

    return decorator
