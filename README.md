# aquilacnn

A compact convolutional neural network inference engine built on NumPy.
Networks are put together layer by layer from a flat buffer of 32-bit float
weights and run forward on one input. All arithmetic is done in single
precision.

The package provides:

- an AlexNet builder (`aquilacnn.models.build_alexnet`) and a ranking and
  report helper for its 1000 outputs;
- layers: `ConvolutionalLayer`, `MaxPoolingLayer`, `AveragePoolingLayer`,
  `BatchNormLayer`, `FullyConnectedLayer`, `DummyHeadLayer` and the two-path
  `ResidualBlock`;
- activations: `identity`, `relu`, `bounded_relu` and a `softmax` whose
  exponential is a 35-term Taylor series;
- the 1000 ImageNet class labels;
- readers for raw float32 files, class-name text files and MNIST image and
  label files.

## Installation

```
pip install .
```

NumPy is the only runtime dependency. Tests run with `pip install .[test]`
and then `pytest`.

## Command line

Classify an image with AlexNet:

```
aquilacnn <weight_file> <image_to_inference> <class_name> <total_CPUs> <hart_id>
```

- `weight_file`: raw little-endian float32 weights, in the order the layers
  take them.
- `image_to_inference`: the input as raw little-endian float32 values,
  3 × 224 × 224 in channel-major order.
- `class_name`: a text file with one class name per line; names are read
  in fields of 40 bytes.
- `total_CPUs`, `hart_id`: how the work is divided. Each layer computes only
  the block of outputs that belongs to `hart_id`; the rest stay zero.

With `hart_id` 0 the command prints `Predict done` followed by a table of the
four highest scores with their indices and class names. It returns 0 on
success and 255 when arguments are missing or invalid, a file cannot be
opened, the weights run out, or an input has the wrong size.

## Library use

```python
from aquilacnn.layer import Controller
from aquilacnn.loader import load_floats, read_class_names
from aquilacnn.models import build_alexnet, top_predictions, format_report

weights = load_floats("alexnet_weights.bin")
image = load_floats("image.bin")
controller = Controller(weights)

network = build_alexnet(controller)
scores = network.predict(image)

names = read_class_names("classes.txt", 1000, 40)
print(format_report(top_predictions(scores, names, 4)), end="")
```

The built-in ImageNet labels are available through
`aquilacnn.imagenet_classes.class_names()` and `class_name(index)`, which
raises `IndexError` outside 0..999.

### Building networks

A `Network` runs its layers in the order they were appended, feeding each
the previous output. Every layer takes its weights (and bias, if any) from
the shared `Controller` when it is created; `Controller.take` raises
`ValueError` when the buffer runs out. A layer that receives an input of the
wrong length raises `SizeMismatchError`.

A `ResidualBlock` holds two paths filled with `add(layer, path)`. After
both are filled, `finalize(previous, controller)` fixes the block's size
from the layer before it. Its forward pass runs both paths on the same
input, adds them and clamps negatives to zero; an empty path passes the
input through.

Some behaviours to be aware of:

- `ConvolutionalLayer` returns the raw convolution sum. A bias, when
  requested, is taken from the weight buffer but not added, and the
  activation is not applied.
- `conv_out_length` uses the padded formula whatever the padding type;
  a layer whose windows would then reach beyond an unpadded input raises
  `ValueError`.
- `AveragePoolingLayer` divides by `pooling_size ** 2` even where a window
  is clipped at the input edge.
- `BatchNormLayer` reads gamma, beta, mean and variance as four rows of
  `channels` values and takes square roots by bisection (`batchnorm.root`).

### MNIST

`aquilacnn.loader.read_mnist_images(path, padding)` returns an
`(n, rows, cols)` float32 array with a zero border of `padding` pixels,
scaled to [0, 1] and normalised with mean 0.1307 and standard deviation
0.3081. `read_mnist_labels(path)` returns the labels as a uint8 array.

## What this package does not do

- It has no ResNet-50 builder: only AlexNet is assembled for you. The
  batch-normalisation and residual layers can be combined by hand.
- It does not train networks; it only runs them forward.
- `total_CPUs` and `hart_id` select a share of the work but nothing runs in
  parallel and the shares of several processes are not combined.