import os
import subprocess
import sys
import threading

from .errors import BridgeError
from .transport import get_codec


class QueryTimeoutException(Exception):
    pass


class BridgeReplyError(BridgeError):
    def __init__(self, kind, message):
        super(BridgeReplyError, self).__init__(message)
        self.kind = kind


class BridgeExitedError(BridgeError):
    pass


class RestartingSubprocessBridge(object):
    def __init__(self, database, codec="json", timeout=2):
        self._database = database
        self._codec_name = codec
        self._timeout = timeout
        self._bridge = None

    def query(self, sql, params=None):
        return self._call(lambda bridge: bridge.query(sql, params))

    def exec_(self, sql, params=None):
        return self._call(lambda bridge: bridge.exec_(sql, params))

    def send(self, event, data):
        return self._call(lambda bridge: bridge.send(event, data))

    def close(self):
        if self._bridge is not None:
            self._bridge.close()
            self._bridge = None

    def _call(self, func):
        self._start_bridge()
        try:
            return func(self._bridge)
        except (QueryTimeoutException, BridgeExitedError):
            self._bridge.kill()
            self._bridge = None
            raise

    def _start_bridge(self):
        if self._bridge is not None:
            return

        process = subprocess.Popen(
            [
                sys.executable,
                "-m",
                "sqlbridge.process",
                os.path.abspath(self._database),
                "--codec",
                self._codec_name,
            ],
            stdout=subprocess.PIPE,
            stdin=subprocess.PIPE,
            start_new_session=True,
        )
        try:
            bridge = SubprocessBridge(process, get_codec(self._codec_name), timeout=self._timeout)
            bridge.handshake()
            self._bridge = bridge
        except BaseException:
            process.kill()
            raise


class SubprocessBridge(object):
    def __init__(self, process, codec, timeout=2):
        self._process = process
        self._codec = codec
        self._timeout = timeout
        self._receiver = iter(codec.frames(process.stdout))
        self._next_id = 0

    def handshake(self, extension_id="sqlbridge.client"):
        self._write({
            "nlPort": None,
            "nlToken": None,
            "nlConnectToken": None,
            "nlExtensionId": extension_id,
        })

    def query(self, sql, params=None):
        return self.send("query", _payload(sql, params))["rows"]

    def exec_(self, sql, params=None):
        return self.send("exec", _payload(sql, params))["done"]

    def send(self, event, data):
        self._next_id += 1
        self._write({"id": self._next_id, "event": event, "data": data})
        reply = self._receive()
        if reply is None:
            raise BridgeExitedError("bridge exited without replying")

        error = reply.get("error")
        if error is not None:
            raise BridgeReplyError(error["kind"], error["message"])
        return reply.get("result")

    def close(self):
        self._process.stdin.close()
        try:
            self._process.wait(timeout=self._timeout)
        except subprocess.TimeoutExpired:
            self.kill()
        self._process.stdout.close()

    def kill(self):
        self._process.kill()
        self._process.wait()

    def _write(self, value):
        try:
            self._process.stdin.write(self._codec.encode(value))
            self._process.stdin.flush()
        except BrokenPipeError as error:
            raise BridgeExitedError("bridge is not running", error) from error

    def _receive(self):
        result = [None]

        def run():
            try:
                result[0] = self._codec.decode(next(self._receiver))
            except StopIteration:
                result[0] = None

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        thread.join(self._timeout)
        if thread.is_alive():
            raise QueryTimeoutException()
        else:
            return result[0]


def _payload(sql, params):
    data = {"sql": sql}
    if params is not None:
        data["params"] = list(params)
    return data
