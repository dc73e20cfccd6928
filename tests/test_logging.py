import asyncio
import io
import re
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from orrery import ServerConfig, application
from orrery.http.model import HTTPHeaders, HTTPRequest
from orrery.utils.logging import LogLevel, event, formatData, info, warning


def plain(text: str) -> str:
	return re.sub(r"\x1b\[[0-9;]*m", "", text)


class LoggingTests(unittest.TestCase):
	def test_events_go_to_stdout(self) -> None:
		out, err = io.StringIO(), io.StringIO()
		with redirect_stdout(out), redirect_stderr(err):
			entry = event("200", "/index.html")
		self.assertIn("200", out.getvalue())
		self.assertIn("/index.html", out.getvalue())
		self.assertEqual(err.getvalue(), "")
		self.assertEqual(entry.origin, "orrery")

	def test_warnings_go_to_stderr(self) -> None:
		out, err = io.StringIO(), io.StringIO()
		with redirect_stdout(out), redirect_stderr(err):
			entry = warning("Could not read images directory", Path="images")
		self.assertEqual(out.getvalue(), "")
		self.assertIn("Could not read images directory", err.getvalue())
		self.assertEqual(entry.level, LogLevel.Warning)

	def test_info_context(self) -> None:
		out = io.StringIO()
		with redirect_stdout(out):
			entry = info("Listening", Port=3000)
		self.assertEqual(entry.context, {"Port": 3000})
		self.assertIn("3000", out.getvalue())

	def test_format_data(self) -> None:
		self.assertEqual(formatData(None), "◌")
		self.assertEqual(formatData(True), "✓")
		self.assertEqual(formatData(1.5), "1.50")
		self.assertEqual(formatData("a b"), "'a b'")
		self.assertEqual(formatData([1, 2]), "1,2")


class RequestLogTests(unittest.TestCase):
	def setUp(self) -> None:
		self.tmp = tempfile.TemporaryDirectory(prefix="orrery_log_")
		root = Path(self.tmp.name)
		(root / "index.html").write_text("<h1>Orrery</h1>")
		(root / "images").mkdir()
		(root / "images" / "saturn.webp").write_bytes(b"RIFF")
		self.app = application(ServerConfig(root=root, logRequests=True))

	def tearDown(self) -> None:
		self.tmp.cleanup()

	def get(self, path: str) -> tuple[int, list[str]]:
		out, err = io.StringIO(), io.StringIO()
		with redirect_stdout(out), redirect_stderr(err):
			res = asyncio.run(
				self.app.process(HTTPRequest("GET", path, {}, HTTPHeaders({})))
			)
		self.assertEqual(err.getvalue(), "")
		return res.status, plain(out.getvalue()).splitlines()

	def test_file_request_is_logged(self) -> None:
		status, lines = self.get("/")
		self.assertEqual(status, 200)
		self.assertEqual(lines, ["[orrery] 200 /"])

	def test_missing_file_is_logged(self) -> None:
		status, lines = self.get("/missing.html")
		self.assertEqual(status, 404)
		self.assertEqual(lines, ["[orrery] 404 /missing.html"])

	def test_image_listing_is_logged(self) -> None:
		status, lines = self.get("/api/images")
		self.assertEqual(status, 200)
		self.assertEqual(len(lines), 1)
		self.assertTrue(lines[0].startswith("[orrery] 200 /api/images"))
		self.assertIn("Images=1", lines[0])


if __name__ == "__main__":
	unittest.main()

# EOF
