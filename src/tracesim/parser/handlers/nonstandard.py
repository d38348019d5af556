"""Non-standard token methods: mint/burn, EIP-3009 authorizations, wrap/unwrap.

Wrap/unwrap follow the WETH shape: deposits credit the wrapped token (funded by
the call's native value), withdrawals debit it. The native leg of an unwrap is
picked up separately by the native transfer handler on the refund call.
"""

from tracesim.parser.handlers.base import CallHandler
from tracesim.parser.utils.abi import AbiFunction
from tracesim.parser.utils.addresses import ZERO_ADDRESS
from tracesim.parser.utils.context import InterpretationContext
from tracesim.parser.utils.tokens import ERC20Token
from tracesim.parser.utils.types import CallTrace

MINT = AbiFunction.parse("mint(address to,uint256 amount)")
BURN = AbiFunction.parse("burn(uint256 amount)")

# EIP-3009
TRANSFER_WITH_AUTHORIZATION = AbiFunction.parse(
    "transferWithAuthorization(address from,address to,uint256 value,uint256 validAfter,"
    "uint256 validBefore,bytes32 nonce,uint8 v,bytes32 r,bytes32 s)"
)
TRANSFER_WITH_AUTHORIZATION_PACKED = AbiFunction.parse(
    "transferWithAuthorization(address from,address to,uint256 value,uint256 validAfter,"
    "uint256 validBefore,bytes32 nonce,bytes signature)"
)

# Wrapped native
DEPOSIT = AbiFunction.parse("deposit()")
DEPOSIT_FOR = AbiFunction.parse("deposit(address to)")
DEPOSIT_TO = AbiFunction.parse("depositTo(address to)")
WITHDRAW = AbiFunction.parse("withdraw(uint256 amount)")
WITHDRAW_TO = AbiFunction.parse("withdrawTo(address to,uint256 amount)")
WITHDRAW_FROM = AbiFunction.parse("withdrawFrom(address from,address to,uint256 amount)")


def handle_mint(ctx: InterpretationContext, trace: CallTrace) -> None:
    args = MINT.decode_input(trace.input)
    ctx.transfer(ZERO_ADDRESS, args["to"], ERC20Token(contract=trace.to_address), args["amount"])


def handle_burn(ctx: InterpretationContext, trace: CallTrace) -> None:
    args = BURN.decode_input(trace.input)
    ctx.transfer(trace.from_address, ZERO_ADDRESS, ERC20Token(contract=trace.to_address), args["amount"])


def _make_authorized_transfer(fn: AbiFunction):
    def handle(ctx: InterpretationContext, trace: CallTrace) -> None:
        args = fn.decode_input(trace.input)
        ctx.transfer(args["from"], args["to"], ERC20Token(contract=trace.to_address), args["value"])

    return handle


def _make_deposit(fn: AbiFunction):
    def handle(ctx: InterpretationContext, trace: CallTrace) -> None:
        if trace.value <= 0:
            return
        args = fn.decode_input(trace.input)
        beneficiary = args.get("to", trace.from_address)
        token = ERC20Token(contract=trace.to_address)
        ctx.credit(beneficiary, token, trace.value)
        ctx.record_payment(ZERO_ADDRESS, beneficiary, token, trace.value)

    return handle


def _make_withdraw(fn: AbiFunction):
    def handle(ctx: InterpretationContext, trace: CallTrace) -> None:
        args = fn.decode_input(trace.input)
        holder = args.get("from", trace.from_address)
        token = ERC20Token(contract=trace.to_address)
        ctx.debit(holder, token, args["amount"])
        ctx.record_payment(holder, ZERO_ADDRESS, token, args["amount"])

    return handle


HANDLERS: list[CallHandler] = [
    CallHandler(name="mint", handle=handle_mint, selector=MINT.selector),
    CallHandler(name="burn", handle=handle_burn, selector=BURN.selector),
    CallHandler(
        name="transfer_with_authorization",
        handle=_make_authorized_transfer(TRANSFER_WITH_AUTHORIZATION),
        selector=TRANSFER_WITH_AUTHORIZATION.selector,
    ),
    CallHandler(
        name="transfer_with_authorization_packed",
        handle=_make_authorized_transfer(TRANSFER_WITH_AUTHORIZATION_PACKED),
        selector=TRANSFER_WITH_AUTHORIZATION_PACKED.selector,
    ),
    CallHandler(name="deposit", handle=_make_deposit(DEPOSIT), selector=DEPOSIT.selector),
    CallHandler(name="deposit_for", handle=_make_deposit(DEPOSIT_FOR), selector=DEPOSIT_FOR.selector),
    CallHandler(name="deposit_to", handle=_make_deposit(DEPOSIT_TO), selector=DEPOSIT_TO.selector),
    CallHandler(name="withdraw", handle=_make_withdraw(WITHDRAW), selector=WITHDRAW.selector),
    CallHandler(name="withdraw_to", handle=_make_withdraw(WITHDRAW_TO), selector=WITHDRAW_TO.selector),
    CallHandler(name="withdraw_from", handle=_make_withdraw(WITHDRAW_FROM), selector=WITHDRAW_FROM.selector),
]
