"""Command line entry point: classify one image with AlexNet."""

from __future__ import annotations

import sys

from aquilacnn.layer import Controller, SizeMismatchError
from aquilacnn.loader import load_floats, read_class_names
from aquilacnn.models import CLASS_COUNT, build_alexnet, format_report, top_predictions

_USAGE = "Usage: {} <weight_file> <image_to_inference> <class_name> <total_CPUs> <hart_id>"
_NAME_WIDTH = 40
_FAILURE = 255


def main(argv=None):
    """Run AlexNet on an image and print the four most likely classes."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) < 5:
        print(_USAGE.format("aquilacnn"), file=sys.stderr)
        return _FAILURE
    weight_path, image_path, names_path, cpus_text, hart_text = args[:5]

    try:
        total_cpus = int(cpus_text)
        hart_id = int(hart_text)
    except ValueError:
        print(f"invalid CPU count or hart id: {cpus_text!r} {hart_text!r}", file=sys.stderr)
        return _FAILURE

    try:
        weights = load_floats(weight_path)
        image = load_floats(image_path)
        print(f"Loading class name: <{names_path}>")
        names = read_class_names(names_path, CLASS_COUNT, _NAME_WIDTH)
    except OSError as exc:
        print(f"open: {exc}", file=sys.stderr)
        return _FAILURE

    try:
        controller = Controller(weights=weights, total_cpus=total_cpus, hart_id=hart_id)
        network = build_alexnet(controller)
        scores = network.predict(image)
    except SizeMismatchError as exc:
        print(f"Error input size not match {exc.actual}/{exc.expected}")
        return _FAILURE
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return _FAILURE

    if hart_id == 0:
        print("Predict done")
        print(format_report(top_predictions(scores, names, 4)), end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())