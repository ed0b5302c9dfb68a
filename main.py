from porter import *

__prog__ = "porter"


class Hello(Command):
    async def execute(self):
        self.console.write(f"hello, {self.arguments[0] if self.arguments else 'world'}!")


hello = command(
    "hello",
    descr="Greets somebody.",
    usage="[name]",
    max_args=1,
)(Hello)


class Greet(Command):
    async def execute(self):
        self.console.write("greetings!")


greet = command(
    "greet",
    descr="Greets everybody.",
    deprecated=True,
    alternative="hello",
)(Greet)


if __name__ == '__main__':
    registry = CommandRegistry(builtins())
    registry.extend([hello.__descriptor__, greet.__descriptor__])
    raise SystemExit(CommandDispatcher(registry, logs=True).run(__import__("sys").argv[1:]))
