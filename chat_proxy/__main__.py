from chat_proxy.server import run


run()
