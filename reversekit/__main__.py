from reversekit.pipeline import main

main()
