import asyncio
import unittest

from orrery import Service, on, expose, mount
from orrery.http.model import HTTPHeaders, HTTPRequest, HTTPRequestError
from orrery.routing import Route


def request(path: str, method: str = "GET") -> HTTPRequest:
	return HTTPRequest(method, path, {}, HTTPHeaders({}))


class Planets(Service):
	@expose(priority=10, GET="/api/planets")
	def planets(self) -> list[str]:
		return ["mercury", "venus"]

	@on(GET="/planet/{index:int}")
	def planet(self, request: HTTPRequest, index: int):
		if index > 7:
			raise HTTPRequestError("No such planet", status=404)
		return request.respond(f"planet {index}", contentType="text/plain")

	@on(ANY="/{path:any}")
	def fallback(self, request: HTTPRequest, path: str):
		return request.respond(f"fallback {path}", contentType="text/plain")


class RouteTests(unittest.TestCase):
	def test_text_route(self) -> None:
		r = Route("/api/images")
		self.assertEqual(r.match("/api/images"), {})
		self.assertIsNone(r.match("/api/images/"))
		self.assertIsNone(r.match("/api/imagesX"))

	def test_parameters_are_extracted(self) -> None:
		r = Route("/post/{id}/{n:int}")
		self.assertEqual(r.match("/post/abc/12"), {"id": "abc", "n": 12})
		self.assertIsNone(r.match("/post/abc/x"))

	def test_any_matches_nested_paths(self) -> None:
		r = Route("/{path:any}")
		self.assertEqual(r.match("/"), {"path": ""})
		self.assertEqual(r.match("/a/b.css"), {"path": "a/b.css"})

	def test_unknown_pattern(self) -> None:
		with self.assertRaises(ValueError):
			Route("/{x:unknown}")


class DispatcherTests(unittest.TestCase):
	def setUp(self) -> None:
		self.app = mount(Planets())

	def process(self, path: str, method: str = "GET"):
		return asyncio.run(self.app.process(request(path, method)))

	def test_priority_wins_over_catch_all(self) -> None:
		res = self.process("/api/planets")
		self.assertEqual(res.status, 200)
		self.assertEqual(res.contentType, "application/json")
		self.assertEqual(res.content, b'["mercury", "venus"]')

	def test_any_method_matches_every_method(self) -> None:
		for method in ("GET", "POST", "DELETE", "HEAD"):
			res = self.process("/somewhere", method)
			self.assertEqual(res.content, b"fallback somewhere")

	def test_method_specific_route(self) -> None:
		self.assertEqual(self.process("/planet/3").content, b"planet 3")
		self.assertEqual(self.process("/planet/3", "POST").content, b"fallback planet/3")

	def test_request_error_becomes_response(self) -> None:
		res = self.process("/planet/9")
		self.assertEqual(res.status, 404)
		self.assertEqual(res.content, b"No such planet")

	def test_unmatched_route_is_not_found(self) -> None:
		app = mount(Service())
		res = app.process(request("/nothing"))
		self.assertEqual(res.status, 404)


if __name__ == "__main__":
	unittest.main()

# EOF
