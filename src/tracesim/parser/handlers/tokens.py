"""Standard token transfers: ERC20, ERC721 and ERC1155."""

from tracesim.parser.handlers.base import CallHandler
from tracesim.parser.utils.abi import AbiFunction
from tracesim.parser.utils.context import InterpretationContext
from tracesim.parser.utils.tokens import ERC20Token, ERC721Token, ERC1155Token
from tracesim.parser.utils.types import CallTrace

# ERC20
TRANSFER = AbiFunction.parse("transfer(address to,uint256 value)")
# ERC20 / ERC721
TRANSFER_FROM = AbiFunction.parse("transferFrom(address from,address to,uint256 valueOrTokenId)")
# ERC721
SAFE_TRANSFER_FROM = AbiFunction.parse("safeTransferFrom(address from,address to,uint256 tokenId)")
SAFE_TRANSFER_FROM_WITH_DATA = AbiFunction.parse(
    "safeTransferFrom(address from,address to,uint256 tokenId,bytes data)"
)
# ERC1155
SAFE_TRANSFER_FROM_1155 = AbiFunction.parse(
    "safeTransferFrom(address from,address to,uint256 id,uint256 value,bytes calldata data)"
)
SAFE_BATCH_TRANSFER_FROM = AbiFunction.parse(
    "safeBatchTransferFrom(address from,address to,uint256[] calldata ids,uint256[] values,bytes calldata data)"
)


def has_return_data(output: str | None) -> bool:
    return output not in (None, "", "0x")


def handle_erc20_transfer(ctx: InterpretationContext, trace: CallTrace) -> None:
    args = TRANSFER.decode_input(trace.input)
    ctx.transfer(trace.from_address, args["to"], ERC20Token(contract=trace.to_address), args["value"])


def handle_transfer_from(ctx: InterpretationContext, trace: CallTrace) -> None:
    """ERC20 and ERC721 share this selector.

    ERC20 returns a bool, ERC721 returns nothing. Tokens on the non-standard
    allow-list return nothing but are still fungible.
    """
    args = TRANSFER_FROM.decode_input(trace.input)
    if has_return_data(trace.output) or ctx.options.is_nonstandard_erc20(trace.to_address):
        token = ERC20Token(contract=trace.to_address)
        ctx.transfer(args["from"], args["to"], token, args["valueOrTokenId"])
    else:
        nft = ERC721Token(contract=trace.to_address, token_id=args["valueOrTokenId"])
        ctx.transfer(args["from"], args["to"], nft, 1)


def _make_erc721_safe_transfer(fn: AbiFunction):
    def handle(ctx: InterpretationContext, trace: CallTrace) -> None:
        args = fn.decode_input(trace.input)
        nft = ERC721Token(contract=trace.to_address, token_id=args["tokenId"])
        ctx.transfer(args["from"], args["to"], nft, 1)

    return handle


def handle_erc1155_transfer(ctx: InterpretationContext, trace: CallTrace) -> None:
    args = SAFE_TRANSFER_FROM_1155.decode_input(trace.input)
    token = ERC1155Token(contract=trace.to_address, token_id=args["id"])
    ctx.transfer(args["from"], args["to"], token, args["value"])


def handle_erc1155_batch_transfer(ctx: InterpretationContext, trace: CallTrace) -> None:
    args = SAFE_BATCH_TRANSFER_FROM.decode_input(trace.input)
    ids, values = args["ids"], args["values"]
    if len(ids) != len(values):
        raise ValueError(f"safeBatchTransferFrom ids/values length mismatch: {len(ids)} != {len(values)}")

    for token_id, value in zip(ids, values):
        token = ERC1155Token(contract=trace.to_address, token_id=token_id)
        ctx.transfer(args["from"], args["to"], token, value)


HANDLERS: list[CallHandler] = [
    CallHandler(name="erc20_transfer", handle=handle_erc20_transfer, selector=TRANSFER.selector),
    CallHandler(name="transfer_from", handle=handle_transfer_from, selector=TRANSFER_FROM.selector),
    CallHandler(
        name="erc721_safe_transfer",
        handle=_make_erc721_safe_transfer(SAFE_TRANSFER_FROM),
        selector=SAFE_TRANSFER_FROM.selector,
    ),
    CallHandler(
        name="erc721_safe_transfer_with_data",
        handle=_make_erc721_safe_transfer(SAFE_TRANSFER_FROM_WITH_DATA),
        selector=SAFE_TRANSFER_FROM_WITH_DATA.selector,
    ),
    CallHandler(name="erc1155_transfer", handle=handle_erc1155_transfer, selector=SAFE_TRANSFER_FROM_1155.selector),
    CallHandler(
        name="erc1155_batch_transfer",
        handle=handle_erc1155_batch_transfer,
        selector=SAFE_BATCH_TRANSFER_FROM.selector,
    ),
]
