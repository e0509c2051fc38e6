class SysbenchRunnerError(RuntimeError):
    """Base class for every fatal error raised by sysbench-runner."""


class CommandError(SysbenchRunnerError):
    def __init__(self, cmd: str, returncode: int, output: str = ""):
        self.cmd = cmd
        self.returncode = returncode
        self.output = output
        super().__init__(f"Command failed ({returncode}): {cmd}\n{output}".rstrip())


class PreconditionError(SysbenchRunnerError):
    pass


class InsufficientSpaceError(PreconditionError):
    pass


class PrivilegeError(PreconditionError):
    pass


class UnsupportedDistroError(SysbenchRunnerError):
    pass


class InstallError(SysbenchRunnerError):
    pass


class BenchmarkError(SysbenchRunnerError):
    pass


class BenchmarkInterrupted(BenchmarkError):
    def __init__(self, signum: int):
        self.signum = signum
        super().__init__(f"Benchmark interrupted by signal {signum}")
