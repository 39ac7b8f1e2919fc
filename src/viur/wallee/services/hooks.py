"""Customization / hook service

Register own implementations (:class:`Customization`) to influence
a specific behavior (:class:`Hook`) of viur-wallee.

Unlike events, which are just a trigger, hooks can (and usually should)
return something.
"""

import abc
import enum
import typing as t

from ..globals import WALLEE_LOGGER
from ..types.exceptions import DispatchError

logger = WALLEE_LOGGER.getChild(__name__)


class Hook(enum.IntEnum):
    """The hook'able actions."""

    PROPERTY_SCOPE = enum.auto()
    """Provide the property (tenant) of the current request,
    used to scope stored tokens.
    type: () -> t.Any
    """

    PAYMENT_RETURN_HANDLER_SUCCESS = enum.auto()
    """
    The action that is executed after the customer has returned
    from the payment page and the payment has been successful.
    This can be, for example, a rendered template or a redirect to another page.
    type: (callback: PaymentCallback) -> t.Any
    """

    PAYMENT_RETURN_HANDLER_ERROR = enum.auto()
    """
    The action that is executed after the customer has returned
    from the payment page and the payment has failed.
    type: (callback: PaymentCallback) -> t.Any
    """


class Customization(abc.ABC):
    """Abstract base class for own implementations."""

    @property
    @abc.abstractmethod
    def kind(self) -> Hook:
        """The action this implementation is for"""
        ...

    @abc.abstractmethod
    def __call__(self, *args, **kwargs) -> t.Any:
        """The main logic of this implementation"""
        ...

    def __repr__(self) -> str:
        return f"<Customization {self.__class__.__name__} for {self.kind.name}>"

    @classmethod
    def from_method(cls, func: t.Callable, kind: Hook) -> t.Self:
        """Just a handy variant to define an implementation without a class definition"""
        return type(
            f"{kind.name}_{func.__name__}{cls.__name__}",
            (cls,),
            {"__call__": staticmethod(func), "kind": kind}
        )()


class HookService:
    """

    Note: Methods should be called only with positional arguments. Or keyword-only if really necessary.
    """

    customizations: t.Final[list[Customization]] = []

    def register(self, customization: Customization | t.Type[Customization]) -> Customization:
        """Register a customization with this service

        Can be used as class decorator too

        .. code-block:: python

            @HOOK_SERVICE.register
            class CurrentProperty(Customization):
                kind = Hook.PROPERTY_SCOPE

                def __call__(self) -> t.Any:
                    return current.session.get()["property_id"]
        """
        if not isinstance(customization, Customization):
            if isinstance(customization, type) and issubclass(customization, Customization):
                customization = customization()
            else:
                raise TypeError(f"customization must be of type Customization")
        HookService.customizations.append(customization)
        return customization

    def unregister(self, customization: Customization):
        HookService.customizations.remove(customization)

    def dispatch(self, kind: Hook, default: t.Callable = None) -> t.Callable:
        """Choose the matching registered customization for this kind

        The latest registration wins.
        """
        for customization in reversed(HookService.customizations):
            if kind is customization.kind:
                logger.debug(f"found {customization=}")
                return customization
        logger.debug(f"found no customization")
        if default is None:
            raise DispatchError(f"No customization found for {kind!r}", kind)
        logger.debug(f"use default customization {default=}")
        return default


HOOK_SERVICE = HookService()
