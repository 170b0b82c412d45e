"""Application layer: the chat turn use case and its helpers."""
