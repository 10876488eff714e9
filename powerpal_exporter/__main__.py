from powerpal_exporter.cli import main

main()
