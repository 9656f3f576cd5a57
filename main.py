
import asyncio
import sys

from dotenv import load_dotenv

from core.errors import FatalConfigError
from core.initialization import initialize_components, load_configuration
from utils.logger import setup_logger

ENV_PATH = "config.env"


async def run_bot() -> None:
    """
    Entrypoint coroutine for the momentum bot.

    Loads config.env, configures a dedicated logger, parses the settings,
    wires the price feed, evaluator, execution gate and scheduler, then runs
    trading cycles until cancelled.  Components inherit the logger created here so that
    console and `logs/bot.log` output share one format.
    """
    # LOG_* settings live in config.env too, so read it before the handlers exist
    load_dotenv(dotenv_path=ENV_PATH)
    logger = setup_logger("MomentumBot", to_console=True)
    config = load_configuration(ENV_PATH, logger=logger)

    components = initialize_components(config, logger=logger)
    scheduler = components["scheduler"]

    logger.info("Starting 7K Momentum Bot...")
    try:
        await scheduler.run()
    finally:
        for name in ("signer", "aggregator"):
            close = getattr(components[name], "close", None)
            if close is not None:
                await close()


def main():
    try:
        asyncio.run(run_bot())
    except FatalConfigError as e:
        setup_logger("MomentumBot").error("Failed to start bot: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n🛑 Bot stopped by user.")


if __name__ == "__main__":
    main()
