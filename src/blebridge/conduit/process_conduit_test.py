import subprocess
import unittest
from io import BytesIO
from unittest.mock import Mock, patch

from hamcrest import assert_that, contains_string, is_

from blebridge.conduit.process_conduit import ProcessConduit


class ProcessConduitTest(unittest.TestCase):

    def setUp(self):
        patcher = patch("subprocess.Popen")
        self.popen = patcher.start()
        self.addCleanup(patcher.stop)
        self.process = self.popen.return_value
        self.process.stderr = BytesIO()
        self.process.wait.return_value = 0

    def test_starts_the_process_with_piped_streams(self):
        sut = ProcessConduit("BLEServer.exe", "arg1", cwd="abc")
        self.popen.assert_called_once_with(("BLEServer.exe", "arg1"), cwd="abc", stdin=subprocess.PIPE,
                                           stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        # the process's output is the conduit's input
        assert_that(sut.input, is_(self.process.stdout))
        assert_that(sut.output, is_(self.process.stdin))

    def test_open_while_the_process_runs(self):
        sut = ProcessConduit("BLEServer.exe")
        self.process.poll.return_value = None
        assert_that(sut.open, is_(True))
        self.process.poll.return_value = 1
        assert_that(sut.open, is_(False))

    def test_close_terminates_the_process_once(self):
        sut = ProcessConduit("BLEServer.exe")
        sut.close()
        assert_that(sut.open, is_(False))
        self.process.terminate.assert_called_once()
        self.process.wait.assert_called_once()
        self.process.stdin.close.assert_called_once()
        self.process.stdout.close.assert_called_once()
        assert_that(sut.stderr_loop.running(), is_(False))

        sut.close()
        self.process.terminate.assert_called_once()

    def test_stream_close_errors_are_logged(self):
        self.process.wait.return_value = 1
        sut = ProcessConduit("BLEServer.exe")
        self.process.stdin.close.side_effect = OSError('closed')
        with self.assertLogs('blebridge.conduit.process_conduit', 'DEBUG') as logs:
            sut.close()
        self.process.stdout.close.assert_called_once()
        assert_that('\n'.join(logs.output), contains_string('exited with code 1'))
        assert_that('\n'.join(logs.output), contains_string('error closing process stream'))

    def test_stderr_is_logged(self):
        sut = ProcessConduit.__new__(ProcessConduit)
        sut.stderr_loop = Mock()
        stream = BytesIO(b'no bluetooth adapter\r\n')
        with self.assertLogs('blebridge.conduit.process_conduit', 'ERROR') as logs:
            sut._log_stderr(stream)
        assert_that(logs.output[0], contains_string('BLEServer: no bluetooth adapter'))
        sut.stderr_loop.stop.assert_not_called()

        sut._log_stderr(stream)
        sut.stderr_loop.stop.assert_called_once()


if __name__ == '__main__':  # pragma no cover
    unittest.main()
