from tracesim.config import Settings
from tracesim.parser.utils.context import InterpretationContext, InterpretOptions
from tracesim.parser.utils.tokens import ERC20Token

ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"
TOKEN = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"


class TestInterpretOptions:
    def test_from_settings(self):
        settings = Settings(
            nonstandard_erc20_tokens=["0xDAC17F958D2EE523A2206206994597C13D831EC7"],
            native_bridge_addresses=[],
            precompile_max_address=0x9,
        )
        options = InterpretOptions.from_settings(settings)
        assert options.is_nonstandard_erc20("0xdac17f958d2ee523a2206206994597c13d831ec7")
        assert not options.is_native_bridge("0x0000000000000000000000000000000000001010")
        assert options.is_precompile("0x0000000000000000000000000000000000000009")
        assert not options.is_precompile("0x000000000000000000000000000000000000000a")

    def test_default_settings_cover_usdt_and_bridge(self):
        options = InterpretOptions.from_settings(Settings())
        assert options.is_nonstandard_erc20("0xdac17f958d2ee523a2206206994597c13d831ec7")
        assert options.is_native_bridge("0x0000000000000000000000000000000000001010")

    def test_with_nonstandard_erc20_is_a_copy(self, options):
        extended = options.with_nonstandard_erc20(TOKEN.upper().replace("0X", "0x"))
        assert extended.is_nonstandard_erc20(TOKEN)
        assert not options.is_nonstandard_erc20(TOKEN)
        assert extended.native_bridge_addresses == options.native_bridge_addresses

    def test_zero_address_is_not_precompile(self, options):
        assert not options.is_precompile("0x0000000000000000000000000000000000000000")
        assert options.is_precompile("0x0000000000000000000000000000000000000001")


class TestInterpretationContext:
    def test_transfer(self, options):
        ctx = InterpretationContext(options)
        ctx.transfer(ALICE.upper().replace("0X", "0x"), BOB, ERC20Token(contract=TOKEN), 10)

        assert ctx.state == {ALICE: {f"erc20:{TOKEN}": "-10"}, BOB: {f"erc20:{TOKEN}": "10"}}
        assert ctx.payments[0].from_address == ALICE
        assert ctx.payments[0].amount == "10"

    def test_credit_without_payment(self, options):
        ctx = InterpretationContext(options)
        ctx.credit(BOB, ERC20Token(contract=TOKEN), 3)
        assert ctx.state == {BOB: {f"erc20:{TOKEN}": "3"}}
        assert ctx.payments == []
