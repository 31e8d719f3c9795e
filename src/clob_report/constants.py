"""Network endpoints, well-known mints and market account layout constants."""

DEFAULT_MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
DEFAULT_DEVNET_RPC_URL = "https://api.devnet.solana.com"

DEFAULT_COINBASE_API_URL = "https://api.coinbase.com/v2"
PRICE_SOURCES = ("coinbase",)

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDT_MINT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"
WSOL_MINT = "So11111111111111111111111111111111111111112"

KNOWN_MINT_SYMBOLS: dict[str, str] = {
    USDC_MINT: "USDC",
    USDT_MINT: "USDT",
    WSOL_MINT: "SOL",
}

REFERENCE_CURRENCY = "USDC"
SUPPORTED_QUOTE_CURRENCIES = ("USDC", "USDT", "SOL")

UNKNOWN_SYMBOL = "UNKNOWN"

# Market account layout: fixed header followed by the FIFO market body.
MARKET_HEADER_SIZE = 576
# The body starts with 32 u64 words of padding before the scalar fields.
MARKET_BODY_PADDING = 256
MARKET_BODY_SCALARS_SIZE = 48

# SPL token account: mint (32) + owner (32) + amount (u64).
TOKEN_ACCOUNT_AMOUNT_OFFSET = 64
