from colorama import init as colorama_init, Fore, Style
from datetime import datetime
colorama_init(autoreset=True)


class Log:
    def __init__(self, verbose: int = 1):
        self.verbose = verbose
        self.URL = Fore.MAGENTA

    def _time(self):
        return datetime.now().strftime("[%H:%M:%S]")

    def _fmt(self, level: str, color: str):
        return f"{self._time()} {color}[{level}]{Style.RESET_ALL}"

    def info(self, msg: str):
        if self.verbose >= 1:
            print(f"{self._fmt('INFO', Fore.CYAN)} {msg}")

    def warn(self, msg: str):
        if self.verbose >= 0:
            print(f"{self._fmt('WARNING', Fore.YELLOW)} {msg}")

    def ok(self, msg: str):
        if self.verbose >= 1:
            print(f"{self._fmt('SUCCESS', Fore.GREEN)} {msg}")

    def fail(self, msg: str):
        print(f"{self._fmt('FAIL', Fore.RED)} {msg}")

    def error(self, msg: str):
        print(f"{self._fmt('ERROR', Fore.RED)} {msg}")

    def debug(self, msg: str):
        if self.verbose >= 2:
            print(f"{self._fmt('DEBUG', Fore.MAGENTA)} {msg}")

    def failure(self, result):
        d = result.detail
        if d.is_network_error:
            reason = f"{Fore.RED}{d.network_error}{Style.RESET_ALL}"
        else:
            reason = f"{Style.DIM}(HTTP {d.status_code}){Style.RESET_ALL}"
        self.fail(f"[{result.target.id}] {self.URL}{result.target.url}"
                  f"{Style.RESET_ALL} {reason}")

    def metrics(self, m, now: float | None = None):
        if self.verbose < 1:
            return
        elapsed = m.elapsed_seconds(now)
        rule = "=" * 44
        print(f"{self._fmt('METRICS', Fore.BLUE)} {rule}")
        print(f"{self._fmt('METRICS', Fore.BLUE)} total requests:      {m.total_requests}")
        print(f"{self._fmt('METRICS', Fore.BLUE)} successful requests: "
              f"{Fore.GREEN}{m.successful_requests}{Style.RESET_ALL}")
        print(f"{self._fmt('METRICS', Fore.BLUE)} failed requests:     "
              f"{Fore.RED}{m.failed_requests}{Style.RESET_ALL}")
        print(f"{self._fmt('METRICS', Fore.BLUE)} throughput:          "
              f"{m.throughput(now):.2f} req/s")
        print(f"{self._fmt('METRICS', Fore.BLUE)} time:                {elapsed:.2f} s")
