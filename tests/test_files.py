import asyncio
import tempfile
import unittest
from pathlib import Path

from orrery import ServerConfig, application
from orrery.http.model import HTTPHeaders, HTTPRequest, HTTPResponse
from orrery.services.files import StaticFileService
from orrery.utils.files import DEFAULT_CONTENT_TYPE, contentType, extension


class ContentTypeTests(unittest.TestCase):
	def test_registered_extensions(self) -> None:
		self.assertEqual(contentType("index.html"), "text/html")
		self.assertEqual(contentType("js/main.js"), "text/javascript")
		self.assertEqual(contentType("styles/app.css"), "text/css")
		self.assertEqual(contentType("data.json"), "application/json")
		self.assertEqual(contentType("earth.png"), "image/png")
		self.assertEqual(contentType("moon.jpg"), "image/jpeg")
		self.assertEqual(contentType("mars.jpeg"), "image/jpeg")
		self.assertEqual(contentType("logo.svg"), "image/svg+xml")
		self.assertEqual(contentType("sun.webp"), "image/webp")

	def test_extension_is_case_insensitive(self) -> None:
		self.assertEqual(extension("EARTH.PNG"), ".png")
		self.assertEqual(contentType("EARTH.PNG"), "image/png")

	def test_unknown_extensions_are_binary(self) -> None:
		self.assertEqual(contentType("archive.bin"), DEFAULT_CONTENT_TYPE)
		self.assertEqual(contentType("README"), "application/octet-stream")


class StaticFileServiceTests(unittest.TestCase):
	def setUp(self) -> None:
		self.tmp = tempfile.TemporaryDirectory(prefix="orrery_files_")
		self.root = Path(self.tmp.name)
		(self.root / "index.html").write_text("<h1>Solar System</h1>")
		(self.root / "styles").mkdir()
		(self.root / "styles" / "app.css").write_text("body { margin: 0 }")
		(self.root / "archive.bin").write_bytes(bytes(range(256)))
		(self.root / "docs").mkdir()
		(self.root / "docs" / "index.html").write_text("docs")
		(self.root / "empty").mkdir()
		# An index that is a directory can't be read
		(self.root / "broken" / "index.html").mkdir(parents=True)
		self.config = ServerConfig(root=self.root, logRequests=False)
		self.app = application(self.config)

	def tearDown(self) -> None:
		self.tmp.cleanup()

	def get(self, path: str, method: str = "GET") -> HTTPResponse:
		return asyncio.run(self.app.process(HTTPRequest(method, path, {}, HTTPHeaders({}))))

	def test_root_serves_index(self) -> None:
		res = self.get("/")
		self.assertEqual(res.status, 200)
		self.assertEqual(res.contentType, "text/html")
		self.assertEqual(res.content, (self.root / "index.html").read_bytes())

	def test_directory_serves_its_index(self) -> None:
		self.assertEqual(self.get("/docs").content, b"docs")
		self.assertEqual(self.get("/docs/").content, b"docs")

	def test_directory_without_index_is_not_found(self) -> None:
		res = self.get("/empty/")
		self.assertEqual(res.status, 404)

	def test_css_content_type(self) -> None:
		res = self.get("/styles/app.css")
		self.assertEqual(res.status, 200)
		self.assertEqual(res.contentType, "text/css")

	def test_unregistered_extension_is_binary(self) -> None:
		res = self.get("/archive.bin")
		self.assertEqual(res.status, 200)
		self.assertEqual(res.contentType, "application/octet-stream")
		self.assertEqual(res.content, bytes(range(256)))
		self.assertEqual(res.getHeader("Content-Length"), "256")

	def test_missing_file(self) -> None:
		res = self.get("/nonexistent.html")
		self.assertEqual(res.status, 404)
		self.assertEqual(res.contentType, "text/plain")
		self.assertIn(b"/nonexistent.html", res.content)
		self.assertEqual(res.content, b"File /nonexistent.html not found!")

	def test_name_too_long_is_not_found(self) -> None:
		name = "a" * 300 + ".html"
		res = self.get(f"/{name}")
		self.assertEqual(res.status, 404)
		self.assertEqual(res.content, f"File /{name} not found!".encode())
		res = self.get(f"/docs/{name}/")
		self.assertEqual(res.status, 404)

	def test_read_failure(self) -> None:
		res = self.get("/broken/")
		self.assertEqual(res.status, 500)
		self.assertTrue(res.content.startswith(b"Error reading file: "))

	def test_methods_are_not_differentiated(self) -> None:
		for method in ("POST", "PUT", "DELETE"):
			self.assertEqual(self.get("/styles/app.css", method).status, 200)

	def test_parent_segments_are_joined_as_is(self) -> None:
		service = StaticFileService(self.config)
		self.assertEqual(
			service.resolvePath("/../outside.txt"),
			self.root.absolute() / ".." / "outside.txt",
		)

	def test_confined_paths(self) -> None:
		service = StaticFileService(
			ServerConfig(root=self.root, confine=True, logRequests=False)
		)
		self.assertIsNone(service.resolvePath("/../outside.txt"))
		self.assertEqual(
			service.resolvePath("/styles/../index.html"),
			self.root.absolute() / "styles" / ".." / "index.html",
		)
		self.assertEqual(
			service.resolvePath("/"), self.root.absolute() / "index.html"
		)


if __name__ == "__main__":
	unittest.main()

# EOF
