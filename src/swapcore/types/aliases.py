type BlockNumber = int
type ChainId = int
type FeeTier = int  # pool fee expressed in hundredths of a basis point, e.g. 3000 = 0.3%
type RequestId = int
