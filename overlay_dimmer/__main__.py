from overlay_dimmer.launcher import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
