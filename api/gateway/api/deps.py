from gateway.services.dispatcher import Dispatcher, get_dispatcher


async def get_gateway() -> Dispatcher:
    return get_dispatcher()
