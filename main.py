from argslots import *


class Arguments(Parser):
    welcome = "This program will print a message a number of times."
    shell = True
    colorful = True

    def __init__(self, **settings):
        super().__init__(**settings)
        self.msg = self.arg(Kind.STR, "msg", "m", descr="The message to print.", required=True)
        self.times = self.arg(Kind.UINT32, "times", "t", 1, "The number of times the message is printed.")
        self.num = self.arg(Kind.BOOL, "num", "n", descr="Print line numbers for the message.")


if __name__ == '__main__':
    arguments = Arguments()
    invoke(arguments)

    for line in range(1, arguments.times.value + 1):
        if arguments.num.value:
            print("%d: %s" % (line, arguments.msg.value))
        else:
            print(arguments.msg.value)
