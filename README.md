# datasetmaker

A small desktop tool for building image-classification datasets. Open a
folder of images, draw boxes around the regions you care about, give each box
a class name, and the tool writes every box out as a cropped JPEG into a
per-class folder under the save directory you choose.

## Installing

```
pip install .
```

The graphical interface uses Tkinter from the standard library; image
handling uses Pillow.

## Running

```
datasetmaker
```

The command takes no options besides `--help`.

## Workflow

1. Open a directory (File menu or the "open folder" button). Every `.png`,
   `.jpg` and `.jpeg` file in it is listed, sorted by name, and the first one
   is shown scaled to fit the view. Opening a directory switches labelling
   mode on (or off again if it was already on); the "label mode" button
   toggles it as well.
2. Choose the classification mode from the Mode menu. Until a mode is
   chosen, clicking on the image only reports that a mode must be chosen.
3. Drag with the left mouse button to draw a temporary box (green). Press
   Escape while drawing to discard it.
4. Pick a class and create the label. The box becomes a label drawn in blue
   with its class name; the selected label is drawn in red with a thicker
   outline and shown in the preview. Clicking inside an existing label
   selects it; Delete, or Backspace once a label has been selected, removes
   the selected label.
5. Set the crop size: tick automatic cropping, enter a width and height and
   confirm. A crop height must have been set this way before any label can
   be created. With automatic cropping on, crops are scaled to fit that size,
   keeping their aspect ratio, and padded with grey borders (letterboxing);
   with it off, crops are saved at their original size.
6. Move to the next or previous image, or leave labelling mode. Unsaved
   labels are written out first; if no save directory has been chosen yet
   you are asked for one. A temporary box that has not been turned into a
   label blocks this until it is cleared.

Crops are saved as `<save dir>/<class>/<image name>_<n>.jpg`, where `n`
counts up from 1 for each image. When a save directory is chosen, images
whose name begins any file already under it are ticked in the list; images
are also ticked once their labels are saved. Deleting the current file's
labels removes all of its `<image name>_*` files under the save directory
after confirmation.

Ctrl + mouse wheel zooms the view between 0.1x and 10x in steps of 1.1.

Exiting from the File menu stores the window geometry in
`~/.datasetmaker.json`.

## What it does not do

- The detection mode only shows an empty panel: boxes can be drawn and
  selected, but no labels are created or saved in that mode.
- Choosing the YOLO format only records the format name and opens a folder;
  no YOLO annotation files are written. The only output is the per-class
  JPEG crops described above.
- Labels are not stored between runs; switching images discards the labels
  of the previous one once they have been saved as crops.

## Using it from code

The pieces behind the window can be driven without a display:

- `datasetmaker.model` – `Rect`, `DetectionLabel`, `LabelMode` and the
  `Session` holding the current labels and settings.
- `datasetmaker.annotator` – `Annotator`, which turns mouse (`MouseButton`)
  and key (`Key`) events into boxes and draws them onto the image.
- `datasetmaker.classifier` – `Classifier`, which names, letterboxes and
  saves crops, raising `ClassifierError` when it cannot, and the `letterbox`
  helper.
- `datasetmaker.browser` – `ImageBrowser` for moving through a folder, plus
  `list_images`, `find_processed`, `fit_scale` and `zoom_scale`.
- `datasetmaker.app` – `AppController`, which wires these together and takes
  callbacks for status messages, folder choice and confirmation;
  `MainWindow`, the Tk front end; and `main`.

## Tests

```
pip install .[test]
pytest
```