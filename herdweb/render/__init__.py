"""Renderers for templates, JSON, XML, downloads and server-sent events, and the render engine."""