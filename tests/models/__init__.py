"""Models and endpoints shared by the OpenAPI extensions tests."""
