# chalkraw

The non-GUI core of a raw photo developer, in three sub-packages:

* **`chalkraw.core`**: the data model. Photos (`photo.Photo`), the
  non-destructive edit state (`edit.EditState`: white balance, tone, presence,
  colour mix, tone curves, parametric curve, HSL, colour grading, detail,
  effects, lens correction, crop, history), develop presets, collections and
  watermark presets. Records get time-ordered version 7 UUIDs from
  `ids.uuid7()`.
* **`chalkraw.catalog`**: a single-file catalog, stored as an SQLite database,
  that holds photos, their edits, develop presets, watermark presets and
  collections. It records a schema version and refuses to open a catalog
  written with a different one.
* **`chalkraw.imaging`**: decodes JPEG, PNG and TIFF files into linear-light
  RGBA float images, honouring EXIF orientation and, where Pillow's colour
  management is available, embedded ICC profiles. It makes catalog
  thumbnails and provides Bayer demosaicing of RAW sensor data.

## Installation

```
pip install chalkraw
```

To run the test suite:

```
pip install "chalkraw[test]"
pytest
```

## Decoding images

```python
from chalkraw.imaging.decode import decode_image, make_thumbnail

image = decode_image("holiday/IMG_0001.jpg")
print(image.width, image.height, image.format)
print(image.pixels.shape)                 # (height, width, 4), float32, 0..1
thumbnail_jpeg = make_thumbnail(image)    # JPEG bytes, long edge 256 px
```

`decode_image_bytes` decodes an image held in memory. Files with a RAW
extension (`.cr2`, `.cr3`, `.nef`, `.arw`, `.raf`, `.pef`, `.orf`, in any
case) go to `decode_raw`, which decodes the largest JPEG preview embedded in
the file; the resulting `LinearImage.format` is then the `RawFormat` of the
file. Other files are identified by their content.

Errors derive from `chalkraw.imaging.exceptions.ImagingError`:
`ImageNotFoundError` for a missing file, `UnsupportedFormatError` for a
format other than JPEG, PNG or TIFF, and `DecodeFailedError` for a file that
cannot be decoded, including a RAW file without a decodable preview.

## Demosaicing sensor data

`chalkraw.imaging.raw` works on sensor samples you supply:

```python
import numpy as np
from chalkraw.imaging.raw import RawImage, demosaic_ahd, half_res_demosaic

raw = RawImage(width=8, height=8, data=np.full(64, 4000, dtype=np.uint16),
               cfa="RGGB", whitelevels=(16383, 16383, 16383, 16383))
rgb = demosaic_ahd(raw)          # (8, 8, 3) linear sRGB, or None if unsuitable
grey = half_res_demosaic(raw)    # (4, 4, 4) grey RGBA preview
```

`demosaic_bilinear` is a simpler 3x3 alternative to `demosaic_ahd`.
`find_embedded_jpeg` and `raw_format_from_extension` are also available.

## Editing and the catalog

```python
from chalkraw.catalog.catalog import Catalog

with Catalog.open_or_create("photos.chalkraw", "My Library") as catalog:
    print(catalog.meta().name)

    for photo in catalog.list_photos():
        edit = catalog.get_edit(photo.id)      # default edit if none stored
        edit.tone.exposure = 1.25
        catalog.upsert_edit(photo.id, edit)

    downloads = catalog.create_collection("  Downloads  ")   # stored as "Downloads"
```

Catalog failures raise `chalkraw.catalog.errors.CatalogError` or one of its
subclasses: `SchemaVersionError`, `PhotoNotFoundError`,
`RecordNotFoundError` and `SerializationError`.

`remove_photo_with_edit` deletes a photo's catalog row, its stored edit and
its collection memberships; the original file on disk is never touched.
`update_photo_path` relinks a photo to a moved file with a `PhotoPathUpdate`.
Collections are listed oldest first; develop and watermark presets newest
first.

A `DevelopPreset` (`DevelopPreset.from_edit`) captures the look of an edit
without per-photo state such as crop, lens correction and history;
`EditState.apply_preset` lays it over another edit.

## What this package does not do

* It does not read sensor data out of RAW files: RAW files are decoded from
  their embedded JPEG preview only, and the demosaic functions take sensor
  samples that the caller provides.
* It does not render edits or export images; edit states are stored and
  compared, not applied to pixels.
* It has no graphical interface.

## Test fixture

The command below writes the striped 1024×768 sample JPEG to
`tests/fixtures/sample.jpg` (or to the path given as its argument):

```
chalkraw-gen-fixture
```