"""redactkit

Detect personally identifiable information in text and redact it from text,
speech recordings and images.

Public API surface:
- redactkit.cli.main : CLI entrypoint
- redactkit.pipeline.build.RedactionPipeline : detect + redact per call
- redactkit.pii : regex detectors, registry, fusion, text redaction
- redactkit.ner : WordPiece + ONNX token classifier + BIO decoder
- redactkit.audio : transcript projection and WAV muting
- redactkit.image : region discovery and box blur
- redactkit.analytics : per-call run reports
"""
__all__ = ["__version__"]
__version__ = "0.1.0"
