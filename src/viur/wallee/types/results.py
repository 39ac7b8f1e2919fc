import typing as t


class FlowResult(t.TypedDict):
    """
    Result of a payment flow of the :class:`viur.wallee.TransactionOrchestrator`.

    ``status`` is ``False`` if the flow failed; ``error`` holds the message then.
    A failed tokenization after a successful charge does not fail the flow,
    it is reported in ``token_error``.
    """
    status: bool
    state: str | None
    transaction_id: int | None
    payment_page_url: str | None
    token_id: str | None
    token_error: str | None
    error: str | None


def flow_result(
    status: bool,
    *,
    state: str | None = None,
    transaction_id: int | None = None,
    payment_page_url: str | None = None,
    token_id: str | None = None,
    token_error: str | None = None,
    error: str | None = None,
) -> FlowResult:
    return FlowResult(
        status=status,
        state=state,
        transaction_id=transaction_id,
        payment_page_url=payment_page_url,
        token_id=token_id,
        token_error=token_error,
        error=error,
    )
